"""Java structural patterns."""

from repo_map.queries.base import ExportRule, LanguageQueries, imp, q

QUERIES = LanguageQueries(
    language="java",
    export_rule=ExportRule.EXPLICIT_ONLY,
    exports=(
        q("public class $NAME { $$$ }", "class"),
        q("public interface $NAME { $$$ }", "class"),
        q("public enum $NAME { $$$ }", "class"),
        q("public record $NAME($$$) { $$$ }", "class"),
        q("public $RET $NAME($$$) { $$$ }", "function"),
        q("public static $RET $NAME($$$) { $$$ }", "function"),
        q("public $RET $NAME($$$);", "function"),
    ),
    functions=(
        q("public $RET $NAME($$$) { $$$ }"),
        q("public static $RET $NAME($$$) { $$$ }"),
        q("protected $RET $NAME($$$) { $$$ }"),
        q("private $RET $NAME($$$) { $$$ }"),
    ),
    classes=(
        q("class $NAME { $$$ }"),
        q("interface $NAME { $$$ }"),
        q("enum $NAME { $$$ }"),
        q("record $NAME($$$) { $$$ }"),
    ),
    constants=(
        q("public static final $TYPE $NAME = $$$;"),
        q("static final $TYPE $NAME = $$$;"),
    ),
    imports=(
        imp("import $SOURCE;", "import"),
        imp("import static $SOURCE;", "import"),
    ),
)
