import sys
from pathlib import Path

# lets tests import main.py and examgrid without an editable install
sys.path.insert(0, str(Path(__file__).parent))
