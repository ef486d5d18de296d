# core/processing/load_data.py

import os
import logging
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd  # type: ignore

from segmentor.utils import raw_data_path, processed_data_path
from ..models import CustomerRecord

logger = logging.getLogger(__name__)


class DataLoader:
    """
    Reads import files into raw string rows and clean datasets into records.
    """

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    def _get_path(self, data_type: str, table_name: str) -> str:
        """
        Resolves the file path for a given data type and table name.
        """
        if os.path.isabs(table_name) or os.path.exists(table_name):
            return table_name
        if data_type == "raw":
            return os.path.join(raw_data_path, f"{table_name}.csv")
        if data_type == "processed":
            return os.path.join(processed_data_path, f"{table_name}.csv")
        raise ValueError(f"❌ Invalid data type: '{data_type}'. Allowed values are 'raw', 'processed'.")

    def load_table(self, table_name: str, data_type: str = "raw") -> pd.DataFrame:
        """
        Load a CSV as text, without type inference or NA conversion, so that
        validation sees exactly what the file contains.
        """
        file_path = self._get_path(data_type, table_name)
        if not os.path.exists(file_path):
            raise FileNotFoundError(f"❌ CSV file not found: {file_path}")

        logger.info(f"📁 Loading table '{table_name}' from CSV: {file_path}")
        df = pd.read_csv(
            file_path,
            dtype=str,
            keep_default_na=False,
            skipinitialspace=True,
            encoding=self.encoding,
        )
        df.columns = [str(c).strip() for c in df.columns]
        logger.info(f"✅ CSV loaded. Rows: {len(df):,}")
        return df

    def load_rows(self, table_name: str, data_type: str = "raw") -> Tuple[List[str], List[Dict[str, Any]]]:
        """Header names and raw row dicts, ready for the import pipeline."""
        df = self.load_table(table_name, data_type)
        return list(df.columns), df.to_dict("records")

    def load_records(self, table_name: str, data_type: str = "processed") -> List[CustomerRecord]:
        """Load a previously saved clean dataset."""
        df = self.load_table(table_name, data_type)
        records = []
        for row in df.to_dict("records"):
            row["satisfaction"] = _number(row["satisfaction"])
            row["loyalty"] = _number(row["loyalty"])
            row["excluded"] = str(row.get("excluded", "")).strip().lower() in ("true", "1", "yes")
            row["date_format"] = row.get("date_format") or None
            records.append(CustomerRecord.from_dict(row))
        return records

    def save_records(self, records: List[CustomerRecord], table_name: str, output_dir: Optional[str] = None) -> str:
        """Persist records as CSV (attributes flattened into columns)."""
        output_dir = output_dir or processed_data_path
        os.makedirs(output_dir, exist_ok=True)
        path = os.path.join(output_dir, f"{table_name}.csv")
        pd.DataFrame([r.to_dict() for r in records]).to_csv(path, index=False)
        logger.info(f"💾 Saved {len(records):,} records to: {path}")
        return path


def _number(value: str) -> float:
    number = float(value)
    return int(number) if number.is_integer() else number
