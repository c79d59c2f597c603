"""Classify strings read from stdin with the native citadel core.

Each non-empty input line is classified and printed as one JSON document. The
native library location comes from ``CITADEL_LIB_PATH`` or ``~/.citadel.yaml``.
"""

from __future__ import annotations

import json
import logging
import sys

from citadel_bridge import UniversalClassifier, format_error_hint, load_bridge_config
from citadel_bridge.ffi import CtypesForeignLayer

logger = logging.getLogger(__name__)


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    layer = CtypesForeignLayer.from_config(load_bridge_config())
    classifier = UniversalClassifier(layer)

    for line in sys.stdin:
        text = line.strip()
        if not text:
            continue
        result = classifier.classify(text)
        document = result.to_dict()
        hint = format_error_hint(result.error)
        if hint:
            document["hint"] = hint
        print(json.dumps(document, sort_keys=True))


if __name__ == "__main__":
    main()
