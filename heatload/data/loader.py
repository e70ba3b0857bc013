"""Data loading module for the building energy-efficiency dataset."""

import logging
import os
from pathlib import Path
from typing import Optional, Union

import pandas as pd

logger = logging.getLogger(__name__)


class EnergyDataIngestor:
    """Handles validated loading of the building table from local files.

    Both the CSV export and the original Excel workbook are accepted; the
    reader is chosen from the file suffix.

    Args:
        file_path: Path to the data file. Falls back to DATA_PATH env var
            or 'data/ENB2012_data.csv' if not provided.
    """

    def __init__(self, file_path: Optional[Union[str, Path]] = None) -> None:
        self.file_path = Path(
            file_path or os.getenv("DATA_PATH", "data/ENB2012_data.csv")
        )

    def load(self, sheet_name: Union[str, int] = 0) -> pd.DataFrame:
        """Load the raw table, dispatching on the file suffix.

        Args:
            sheet_name: Sheet index or name, used for Excel files only.

        Returns:
            Raw DataFrame, columns exactly as found in the file.
        """
        if self.file_path.suffix.lower() in {".xlsx", ".xlsm", ".xls"}:
            return self.load_excel_data(sheet_name=sheet_name)
        return self.load_csv_data()

    def load_csv_data(self) -> pd.DataFrame:
        """Load a CSV file into a DataFrame with validation.

        Returns:
            Loaded DataFrame.

        Raises:
            FileNotFoundError: If the file path does not exist.
            ValueError: If the loaded DataFrame is empty.
        """
        logger.info("Attempting to load data from: %s", self.file_path)
        self._check_exists()

        try:
            df = pd.read_csv(self.file_path)
        except pd.errors.EmptyDataError:
            raise ValueError(f"Loaded DataFrame from '{self.file_path}' is empty.")
        except Exception as exc:
            logger.error("Failed to read CSV file: %s", exc)
            raise

        return self._check_not_empty(df)

    def load_excel_data(self, sheet_name: Union[str, int] = 0) -> pd.DataFrame:
        """Load an Excel file into a DataFrame with validation.

        Args:
            sheet_name: Sheet index or name to load. Defaults to first sheet.

        Returns:
            Loaded DataFrame.

        Raises:
            FileNotFoundError: If the file path does not exist.
            ValueError: If the loaded DataFrame is empty.
        """
        logger.info("Attempting to load data from: %s", self.file_path)
        self._check_exists()

        try:
            df = pd.read_excel(
                self.file_path, sheet_name=sheet_name, engine="openpyxl"
            )
        except Exception as exc:
            logger.error("Failed to read Excel file: %s", exc)
            raise

        return self._check_not_empty(df)

    def _check_exists(self) -> None:
        if not self.file_path.exists():
            msg = f"File not found: {self.file_path}"
            logger.error(msg)
            raise FileNotFoundError(msg)

    def _check_not_empty(self, df: pd.DataFrame) -> pd.DataFrame:
        if df.empty:
            raise ValueError(f"Loaded DataFrame from '{self.file_path}' is empty.")
        logger.info("Successfully loaded %d rows and %d columns.", *df.shape)
        return df
