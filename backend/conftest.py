# Ensure '<repo>/backend' is on sys.path so 'import weddinglens.*' and
# 'import tests.*' work even without an editable install.
from pathlib import Path
import sys

_BACKEND_ROOT = Path(__file__).resolve().parent  # <repo>/backend
if str(_BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(_BACKEND_ROOT))
