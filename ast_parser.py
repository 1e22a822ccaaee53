import logging
import os
import subprocess
import sys

from clang import cindex


logger = logging.getLogger(__name__)

_LIB_NAMES = ("libclang.dylib", "libclang.so", "libclang.dll")
_C_EXTENSIONS = {".c", ".h"}


def _find_libclang():
    env_path = os.environ.get("LIBCLANG_FILE") or os.environ.get("LIBCLANG_PATH")
    if env_path:
        if os.path.isdir(env_path):
            for name in _LIB_NAMES:
                candidate = os.path.join(env_path, name)
                if os.path.exists(candidate):
                    return candidate
        if os.path.exists(env_path):
            return env_path

    if getattr(sys, "frozen", False):
        base = getattr(sys, "_MEIPASS", None)
        if base:
            for name in _LIB_NAMES:
                for rel in (name, os.path.join("lib", name)):
                    candidate = os.path.join(base, rel)
                    if os.path.exists(candidate):
                        return candidate

    for candidate in (
        "/opt/homebrew/opt/llvm/lib/libclang.dylib",
        "/usr/local/opt/llvm/lib/libclang.dylib",
    ):
        if os.path.exists(candidate):
            return candidate

    # The libclang wheel ships its own library and cindex finds it unaided.
    return None


libclang_path = _find_libclang()
if libclang_path:
    logger.debug("using libclang at %s", libclang_path)
    cindex.Config.set_library_file(libclang_path)


class ParseSourceError(RuntimeError):
    pass


def _translation_unit_failure_hint(filename):
    base = os.path.basename(filename)
    return (
        f"Could not parse '{base}'. "
        "This usually means severe syntax errors or missing headers/toolchain paths. "
        "Try: clang -fsyntax-only <file> to see compiler diagnostics."
    )


def _sdk_args():
    try:
        sdk_path = subprocess.check_output(
            ["xcrun", "--show-sdk-path"],
            stderr=subprocess.DEVNULL,
            text=True,
        ).strip()
    except (OSError, subprocess.CalledProcessError):
        return []

    if not sdk_path:
        return []
    args = ["-isysroot", sdk_path]
    include = os.path.join(sdk_path, "usr/include/c++/v1")
    if os.path.isdir(include):
        args.extend(["-I", include])
    return args


def _language_args(filename):
    ext = os.path.splitext(filename)[1].lower()
    if ext in _C_EXTENSIONS:
        return ["-x", "c", "-std=gnu11"]
    return ["-x", "c++", "-std=gnu++17"]


def parse_source_file(filename, extra_args=None):
    if not os.path.exists(filename):
        raise ParseSourceError(f"Input file does not exist: {filename}")
    if not os.path.isfile(filename):
        raise ParseSourceError(f"Input path is not a file: {filename}")

    args = _language_args(filename) + _sdk_args() + list(extra_args or [])
    options = cindex.TranslationUnit.PARSE_DETAILED_PROCESSING_RECORD
    logger.debug("parsing %s with args %s", filename, args)

    try:
        index = cindex.Index.create()
        return index.parse(filename, args=args, options=options)
    except cindex.LibclangError as exc:
        raise ParseSourceError(f"libclang could not be loaded: {exc}") from exc
    except cindex.TranslationUnitLoadError as exc:
        raise ParseSourceError(_translation_unit_failure_hint(filename)) from exc
