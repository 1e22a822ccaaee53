import json
import logging
import os
import sys
import time

from engine_factory import build_engine
from rule_config import ConfigError, RuleConfig
from syntax_node import MalformedTreeError, node_from_dict


logger = logging.getLogger(__name__)

USAGE = "Usage: check_conditions.py [--text] [--verbose] [--config FILE] FILE..."
TREE_EXTENSIONS = {".json"}


def _round_ms(value):
    return round(max(0.0, float(value)), 3)


def _summary(items):
    out = {"error": 0, "warning": 0, "info": 0}
    for item in items:
        sev = item.get("severity", "info")
        if sev not in out:
            sev = "info"
        out[sev] += 1
    out["total"] = out["error"] + out["warning"] + out["info"]
    return out


def _load_tree_file(filename):
    with open(filename, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise MalformedTreeError(f"Invalid JSON tree in {filename}: {exc}") from exc
    return node_from_dict(data, file=filename)


def _load_source_file(filename):
    # Imported lazily so tree-only runs never need libclang.
    from ast_parser import parse_source_file
    from clang_tree import build_tree, diagnostic_items, has_blocking_errors

    translation_unit = parse_source_file(filename)
    diagnostics = diagnostic_items(translation_unit, filename)
    if has_blocking_errors(diagnostics):
        return None, diagnostics
    return build_tree(translation_unit.cursor, target_file=filename), diagnostics


def _failed_result(filename, message, timing):
    return {
        "file": os.path.basename(filename),
        "path": os.path.realpath(filename),
        "ok": False,
        "error": message,
        "analyzed": False,
        "findings": [],
        "items": [
            {
                "severity": "error",
                "source": "runtime",
                "rule": None,
                "line": None,
                "column": None,
                "message": message,
            }
        ],
        "summary": {"error": 1, "warning": 0, "info": 0, "total": 1},
        "timing_ms": timing,
    }


def analyze_file(filename, engine):
    load_start = time.perf_counter()
    try:
        if os.path.splitext(filename)[1].lower() in TREE_EXTENSIONS:
            tree, diagnostics = _load_tree_file(filename), []
        else:
            tree, diagnostics = _load_source_file(filename)
    except (OSError, RuntimeError, MalformedTreeError) as exc:
        load_ms = (time.perf_counter() - load_start) * 1000.0
        logger.debug("failed to load %s", filename, exc_info=True)
        return _failed_result(filename, f"Failed to load {os.path.basename(filename)}: {exc}", {"load": _round_ms(load_ms)})
    load_ms = (time.perf_counter() - load_start) * 1000.0

    analysis_ms = 0.0
    findings = []
    if tree is not None:
        analysis_start = time.perf_counter()
        try:
            findings = engine.run(tree)
        except MalformedTreeError as exc:
            return _failed_result(filename, f"Malformed syntax tree: {exc}", {"load": _round_ms(load_ms)})
        analysis_ms = (time.perf_counter() - analysis_start) * 1000.0

    items = diagnostics + [f.to_dict() for f in findings]
    return {
        "file": os.path.basename(filename),
        "path": os.path.realpath(filename),
        "ok": True,
        "error": None,
        "analyzed": tree is not None,
        "findings": [str(f) for f in findings],
        "items": items,
        "summary": _summary(items),
        "timing_ms": {
            "load": _round_ms(load_ms),
            "analysis": _round_ms(analysis_ms),
            "total": _round_ms(load_ms + analysis_ms),
        },
    }


def _print_text(result, show_header):
    if show_header:
        print(f"=== {result['file']} ===")
    if not result["ok"]:
        print(result["error"])
        return
    if not result["analyzed"]:
        print("[WARN] Rule checks were skipped because the parser reported errors.")
    for item in result["items"]:
        prefix = {"error": "[ERROR]", "warning": "[WARN]"}.get(item.get("severity"), "[INFO]")
        parts = []
        if isinstance(item.get("line"), int):
            parts.append(f"line {item['line']}")
        if isinstance(item.get("column"), int):
            parts.append(f"column {item['column']}")
        location = f" ({', '.join(parts)})" if parts else ""
        print(f"{prefix} {item.get('message', '').strip()}{location}")


def _usage_error(message, json_mode):
    if json_mode:
        print(json.dumps({"ok": False, "error": message}))
    else:
        print(message)
        print(USAGE)
    return 2


def main(argv=None):
    args = list(sys.argv[1:] if argv is None else argv)
    json_mode = True
    if "--text" in args:
        json_mode = False
        args = [a for a in args if a != "--text"]

    verbose = False
    if "--verbose" in args:
        verbose = True
        args = [a for a in args if a != "--verbose"]

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    config = RuleConfig()
    if "--config" in args:
        idx = args.index("--config")
        if idx + 1 >= len(args):
            return _usage_error("Missing value after --config (expected a YAML file).", json_mode)
        config_path = args[idx + 1]
        args = args[:idx] + args[idx + 2 :]
        try:
            config = RuleConfig.from_yaml(config_path)
        except (OSError, ConfigError) as exc:
            return _usage_error(f"Invalid configuration: {exc}", json_mode)

    files = args
    if not files:
        return _usage_error("No files provided.", json_mode)

    engine = build_engine(config)
    overall_start = time.perf_counter()
    results = []
    for idx, filename in enumerate(files):
        result = analyze_file(filename, engine)
        results.append(result)
        if not json_mode:
            _print_text(result, show_header=len(files) > 1)
            if idx < len(files) - 1:
                print()

    if json_mode:
        total_ms = _round_ms((time.perf_counter() - overall_start) * 1000.0)
        print(json.dumps({"ok": True, "results": results, "timing_ms": {"total": total_ms}}))

    failed = any(not r["ok"] or not r["analyzed"] or r["findings"] for r in results)
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
