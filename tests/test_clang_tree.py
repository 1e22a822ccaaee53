import tempfile
import textwrap
import unittest
from pathlib import Path

try:
    from clang import cindex

    cindex.Index.create()
    HAVE_LIBCLANG = True
except Exception:
    HAVE_LIBCLANG = False

from engine_factory import analyze
from syntax_node import NodeKind


C_FIXTURE = """\
int fetch(void);
void use(int v);

int main(void) {
    int v = 0;
    if (v = fetch()) {
        use(v);
    }
    if ((v = fetch())) {
        use(v);
    }
    while (v = fetch())
        use(v);
    do {
        use(v);
    } while (v = fetch());
    if ((v = fetch()) != 0) {
        use(v);
    }
    if (v == 3) {
        use(v);
    }
    return 0;
}
"""


CPP_FIXTURE = """\
int fetch();

int main() {
    int v = 0;
    if (v = fetch()) {
        return 1;
    }
    if (int x = fetch()) {
        return x;
    }
    while ((v = fetch())) {
        v--;
    }
    return v;
}
"""


@unittest.skipUnless(HAVE_LIBCLANG, "libclang is not available")
class ClangTreeTest(unittest.TestCase):
    def _parse(self, code, filename):
        from ast_parser import parse_source_file
        from clang_tree import build_tree, diagnostic_items

        with tempfile.TemporaryDirectory() as td:
            src = Path(td) / filename
            src.write_text(textwrap.dedent(code), encoding="utf-8")
            tu = parse_source_file(str(src))
            return build_tree(tu.cursor, target_file=str(src)), diagnostic_items(tu, str(src))

    def _sites(self, tree):
        from condition_extractor import iter_condition_sites

        return list(iter_condition_sites(tree))

    def test_c_constructs_are_mapped(self):
        tree, _diagnostics = self._parse(C_FIXTURE, "fixture.c")
        sites = self._sites(tree)

        self.assertEqual(
            [s.construct for s in sites],
            [NodeKind.IF_BRANCH, NodeKind.IF_BRANCH, NodeKind.WHILE_LOOP, NodeKind.WHILE_LOOP, NodeKind.IF_BRANCH, NodeKind.IF_BRANCH],
        )
        self.assertEqual([s.modifier for s in sites], [False, False, False, True, False, False])
        self.assertEqual(
            [s.node.kind for s in sites],
            [
                NodeKind.ASSIGNMENT,
                NodeKind.PARENTHESIZED,
                NodeKind.ASSIGNMENT,
                NodeKind.ASSIGNMENT,
                NodeKind.COMPARISON,
                NodeKind.COMPARISON,
            ],
        )

    def test_c_findings(self):
        tree, _diagnostics = self._parse(C_FIXTURE, "fixture.c")
        findings = analyze(tree)
        self.assertEqual([f.position.line for f in findings], [6, 12, 16])
        self.assertTrue(all(f.position.file.endswith("fixture.c") for f in findings))

    def test_cpp_findings(self):
        tree, _diagnostics = self._parse(CPP_FIXTURE, "fixture.cpp")
        findings = analyze(tree)
        self.assertEqual([f.position.line for f in findings], [5])

    def test_rule_can_be_switched_off(self):
        tree, _diagnostics = self._parse(C_FIXTURE, "fixture.c")
        self.assertEqual(analyze(tree, {"flagBareAssignment": False}), [])

    def test_parse_errors_are_reported(self):
        from clang_tree import has_blocking_errors

        _tree, diagnostics = self._parse("int main(void) { if (x = ) {} }\n", "broken.c")
        self.assertTrue(has_blocking_errors(diagnostics))
        self.assertTrue(all(d["source"] == "clang" for d in diagnostics))

    def test_missing_file(self):
        from ast_parser import ParseSourceError, parse_source_file

        with self.assertRaises(ParseSourceError):
            parse_source_file("/nonexistent/fixture.c")


if __name__ == "__main__":
    unittest.main()
