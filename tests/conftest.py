"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages,
and provides shared dump fixtures.
"""

import sys
from pathlib import Path

import pytest

# Insert local src directory at the beginning of sys.path
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of semcov modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("semcov"):
        del sys.modules[module_name]


SAFE_HEAD_DUMP = """\
Main.safeHead = [{arg:0}]: (%case !{arg:0} [(%concase [nil] Prelude.Basics.Nil Just 0 [] (Prelude.Types.Nothing [])) (%concase [cons] Prelude.Basics.(::) Just 1 [{e:2}, {e:3}] (Prelude.Types.Just [!{e:2}]))] Nothing)
"""

BAD_HEAD_DUMP = """\
Main.badHead = [{arg:0}]: (%case !{arg:0} [(%concase [cons] Prelude.Basics.(::) Just 1 [{e:2}, {e:3}] !{e:2})] Just (%crash "Unhandled input for Main.badHead at Main.idr:5:1--5:20"))
"""

VECT_HEAD_DUMP = """\
Main.vhead = [{arg:0}, {arg:1}]: (%case !{arg:1} [(%concase [cons] Data.Vect.(::) Just 1 [{e:2}, {e:3}] !{e:2})] Just (%crash "Impossible case encountered"))
"""


@pytest.fixture
def safe_head_dump() -> str:
    return SAFE_HEAD_DUMP


@pytest.fixture
def bad_head_dump() -> str:
    return BAD_HEAD_DUMP


@pytest.fixture
def vect_head_dump() -> str:
    return VECT_HEAD_DUMP
