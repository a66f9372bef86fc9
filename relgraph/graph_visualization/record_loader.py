"""
Record Loader

Reads tabular relation data into RelationRecord sequences.
"""

from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

import pandas as pd

from ..core.config_manager import RecordSchemaConfig, get_config
from ..core.exceptions import RecordLoadError
from ..core.logging_config import get_logger
from .visualization_data_models import RelationRecord

logger = get_logger("graph_visualization.record_loader")


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    text = str(value).strip()
    return text or None


def records_from_rows(rows: Iterable[Dict[str, Any]],
                      schema: Optional[RecordSchemaConfig] = None) -> List[RelationRecord]:
    """
    Map flat rows to relation records.

    Rows without a source, target or label value are dropped. Missing detail
    values are omitted from the record's details.
    """
    schema = schema or get_config().records
    records = []
    dropped = 0

    for row in rows:
        source_id = _clean(row.get(schema.source_column))
        target_id = _clean(row.get(schema.target_column))
        label = _clean(row.get(schema.label_column))
        if source_id is None or target_id is None or label is None:
            dropped += 1
            continue
        details = tuple(
            detail for detail in (_clean(row.get(column)) for column in schema.detail_columns)
            if detail is not None
        )
        records.append(RelationRecord(source_id=source_id, target_id=target_id,
                                      label=label, details=details))

    if dropped:
        logger.warning(f"Dropped {dropped} row(s) missing source, target or label")
    return records


def load_records_from_csv(path: Union[str, Path],
                          schema: Optional[RecordSchemaConfig] = None) -> List[RelationRecord]:
    """
    Load relation records from a CSV file.

    Header names are stripped of surrounding whitespace and empty rows are
    skipped.

    Raises:
        RecordLoadError: If the file cannot be read or lacks a required column
    """
    schema = schema or get_config().records
    path = Path(path)
    if not path.exists():
        raise RecordLoadError(str(path), f"CSV file not found: {path}")

    try:
        frame = pd.read_csv(path, dtype=str, skip_blank_lines=True, keep_default_na=True)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise RecordLoadError(str(path), f"Failed to parse {path}: {e}")

    frame.columns = [str(column).strip() for column in frame.columns]
    frame = frame.dropna(how="all")

    required = [schema.source_column, schema.target_column, schema.label_column]
    missing = [column for column in required if column not in frame.columns]
    if missing:
        raise RecordLoadError(str(path), f"{path} is missing required column(s): {', '.join(missing)}")

    absent_details = [column for column in schema.detail_columns if column not in frame.columns]
    if absent_details:
        logger.info(f"Detail column(s) not present in {path.name}: {', '.join(absent_details)}")

    records = records_from_rows(frame.to_dict(orient="records"), schema)
    logger.info(f"Loaded {len(records)} relation records from {path.name}")
    return records
