"""
Class label loading.

The label file is plain text with one class name per line; the line
number (0-based) is the class id. Lines are kept verbatim apart from the
line terminator, so blank lines still occupy a class id.
"""

import logging
from pathlib import Path
from typing import List, Union

logger = logging.getLogger(__name__)


def load_labels(path: Union[str, Path]) -> List[str]:
    """Read class labels from a line-based text file.

    Args:
        path: Path to the labels file (for example ``coco.names``).

    Returns:
        Labels in file order.

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(
            f"Labels file not found.\n"
            f"  Expected: {path}\n"
            f"  Provide the file or update 'model.labels_path' in your config."
        )

    with open(path, "r", encoding="utf-8") as f:
        labels = f.read().splitlines()

    logger.info("Loaded %d class labels from %s", len(labels), path)
    return labels
