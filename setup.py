"""
Build script for cleanhtml.

Metadata lives in pyproject.toml; this file only adds the optional mypyc
extension modules for the traversal and serializer:

    CLEANHTML_USE_MYPYC=1 pip install .
"""

import os
import sys

from setuptools import setup

# Only the traversal hot path is compiled; node.py and sanitize.py rely on
# slotted dataclasses and a Protocol that mypyc handles poorly.
MYPYC_MODULES = [
    "src/cleanhtml/cleaner.py",
    "src/cleanhtml/serialize.py",
]


def mypyc_extensions() -> list:
    try:
        from mypyc.build import mypycify
    except ImportError:
        sys.exit("CLEANHTML_USE_MYPYC=1 needs mypyc: pip install cleanhtml[mypyc]")

    return mypycify(
        MYPYC_MODULES,
        opt_level=os.environ.get("MYPYC_OPT_LEVEL", "3"),
        debug_level=os.environ.get("MYPYC_DEBUG_LEVEL", "0"),
    )


if __name__ == "__main__":
    use_mypyc = os.environ.get("CLEANHTML_USE_MYPYC", "0") == "1"
    setup(ext_modules=mypyc_extensions() if use_mypyc else [])
