import json
from pathlib import Path
import sys
from jsonschema import validate, ValidationError
from logging import getLogger

from logging_config import setup_logging

logger = getLogger(__name__)

SCHEMA_PATH = Path("schemas/product_detail_schema.json")
OUTPUT_PATH = Path("outputs/product_detail.json")


def main(schema_path: Path = SCHEMA_PATH, output_path: Path = OUTPUT_PATH) -> int:
    if not schema_path.exists():
        logger.error("Schema not found: %s", schema_path)
        return 2
    if not output_path.exists():
        logger.error("Product detail output not found: %s", output_path)
        return 2

    schema = json.loads(schema_path.read_text(encoding="utf8"))
    detail = json.loads(output_path.read_text(encoding="utf8"))

    try:
        validate(instance=detail, schema=schema)
    except ValidationError as e:
        logger.error("Validation failed: %s", e.message)
        return 1

    logger.info("Validation passed")
    return 0


if __name__ == "__main__":
    setup_logging()
    sys.exit(main())
