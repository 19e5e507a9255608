import os
import tempfile

# Keep test runs from writing bot logs into the working directory
os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "lootbot-test-logs"))

import pytest

from helpers import make_drop
from utils.drop_models import DropTable


@pytest.fixture
def simple_table():
    return DropTable(
        name="Test Beast",
        always=[make_drop("Bones", 3, 1, "Always")],
        main=[
            make_drop("Coins", (10, 20), 26, "5/130"),
            make_drop("Feather", 5, 43.33, "3/130"),
        ],
        uniques=[make_drop("Beast claw", 1, 512)],
        tertiary=[make_drop("Clue scroll (hard)", 1, 128), make_drop("Beast pet", 1, 3000)],
    )
