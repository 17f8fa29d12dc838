"""Rust structural patterns. Every ``pub`` visibility form counts as an export."""

from repo_map.queries.base import ExportRule, LanguageQueries, imp, q

_VISIBILITY = ("pub", "pub(crate)", "pub(super)", "pub(in $PATH)")


def _public(template: str, kind: str) -> tuple:
    return tuple(q(template.format(vis=vis), kind) for vis in _VISIBILITY)


EXPORTS = (
    _public("{vis} fn $NAME($$$) {{ $$$ }}", "function")
    + _public("{vis} struct $NAME {{ $$$ }}", "type")
    + _public("{vis} enum $NAME {{ $$$ }}", "type")
    + _public("{vis} trait $NAME {{ $$$ }}", "type")
    + _public("{vis} type $NAME = $$$", "type")
    + _public("{vis} const $NAME: $TYPE = $$$", "constant")
    + _public("{vis} static $NAME: $TYPE = $$$", "constant")
    + _public("{vis} mod $NAME {{ $$$ }}", "module")
    + (q("pub mod $NAME;", "module"),)
)

QUERIES = LanguageQueries(
    language="rust",
    export_rule=ExportRule.EXPLICIT_ONLY,
    exports=EXPORTS,
    functions=(
        q("fn $NAME($$$) { $$$ }"),
        q("async fn $NAME($$$) { $$$ }"),
        q("pub fn $NAME($$$) { $$$ }"),
        q("pub(crate) fn $NAME($$$) { $$$ }"),
        q("pub(super) fn $NAME($$$) { $$$ }"),
        q("pub(in $PATH) fn $NAME($$$) { $$$ }"),
        q("pub async fn $NAME($$$) { $$$ }"),
        q("pub(crate) async fn $NAME($$$) { $$$ }"),
    ),
    types=(
        q("struct $NAME { $$$ }"),
        q("enum $NAME { $$$ }"),
        q("trait $NAME { $$$ }"),
        q("type $NAME = $$$"),
        q("pub struct $NAME { $$$ }"),
        q("pub enum $NAME { $$$ }"),
        q("pub trait $NAME { $$$ }"),
        q("pub type $NAME = $$$"),
    ),
    constants=(
        q("const $NAME: $TYPE = $$$"),
        q("static $NAME: $TYPE = $$$"),
    ),
    imports=(
        imp("use $SOURCE;", "use"),
        imp("use $SOURCE::{ $$$ };", "use"),
        imp("use $SOURCE::*;", "use"),
    ),
)
