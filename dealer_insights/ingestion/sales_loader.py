"""
Sales Export Loader

Reads the distributor's sales export (CSV) and the displays document (JSON)
into engine records. Supports:
- Configurable column names
- Collection extraction from item descriptions
- Unit price derived from line amount / quantity
- Row-level failure counting without aborting the load
"""

import hashlib
import json
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import polars as pl
import structlog
from pydantic import BaseModel

from dealer_insights.models.records import DisplayRecord, DisplayStatus, RawOrder
from dealer_insights.transformation.cleaners import extract_collection_name

logger = structlog.get_logger(__name__)


class LoadStatus(str, Enum):
    """Load status"""
    COMPLETED = "completed"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass
class SalesFileConfig:
    """Column layout of a sales export"""
    file_path: Union[str, Path]
    sku_column: str = "SKU"
    description_column: str = "ItemDescription"
    customer_column: str = "CustomerNo"
    date_column: str = "PostingDate"
    quantity_column: str = "OrderQuantity"
    amount_column: str = "AmountExclVAT"
    order_number_column: Optional[str] = None
    delimiter: str = ","
    encoding: str = "utf8"
    date_format: str = "%Y-%m-%d"
    null_values: List[str] = field(default_factory=lambda: ["", "NULL", "null", "None", "NA", "N/A"])


class LoadResult(BaseModel):
    """Result of a load operation"""
    file_path: str
    status: LoadStatus
    rows_loaded: int = 0
    rows_failed: int = 0
    error_message: Optional[str] = None
    load_duration_seconds: float = 0
    started_at: datetime
    completed_at: Optional[datetime] = None
    file_hash: Optional[str] = None


def _compute_file_hash(file_path: Path) -> str:
    """MD5 of the file contents, for provenance"""
    hash_md5 = hashlib.md5()
    with open(file_path, "rb") as f:
        for chunk in iter(lambda: f.read(4096), b""):
            hash_md5.update(chunk)
    return hash_md5.hexdigest()


def _finish(result: LoadResult, loaded: int, failed: int) -> LoadResult:
    result.rows_loaded = loaded
    result.rows_failed = failed
    result.status = LoadStatus.PARTIAL if failed else LoadStatus.COMPLETED
    result.completed_at = datetime.utcnow()
    result.load_duration_seconds = (result.completed_at - result.started_at).total_seconds()
    return result


def _fail(result: LoadResult, error: Exception) -> LoadResult:
    result.status = LoadStatus.FAILED
    result.error_message = str(error)
    result.completed_at = datetime.utcnow()
    result.load_duration_seconds = (result.completed_at - result.started_at).total_seconds()
    logger.error("Load failed", error=str(error), file=result.file_path)
    return result


class SalesExportLoader:
    """
    Loads sales export lines as RawOrder records.

    Example:
        loader = SalesExportLoader()
        orders, result = loader.load(SalesFileConfig(file_path="data/sales.csv"))
    """

    def _read_csv(self, config: SalesFileConfig) -> pl.DataFrame:
        """Read every column as text; typing happens in _parse"""
        return pl.read_csv(
            config.file_path,
            separator=config.delimiter,
            encoding=config.encoding,
            null_values=config.null_values,
            infer_schema_length=0,
        )

    def _parse(self, df: pl.DataFrame, config: SalesFileConfig) -> pl.DataFrame:
        missing = [
            c for c in (
                config.sku_column,
                config.description_column,
                config.customer_column,
                config.date_column,
                config.quantity_column,
                config.amount_column,
            )
            if c not in df.columns
        ]
        if missing:
            raise ValueError(f"Missing columns: {missing}")

        order_number = (
            pl.col(config.order_number_column)
            if config.order_number_column and config.order_number_column in df.columns
            else pl.lit(None, dtype=pl.Utf8)
        )
        return df.select(
            pl.col(config.sku_column).str.strip_chars().alias("sku"),
            pl.col(config.description_column).alias("description"),
            pl.col(config.customer_column).str.strip_chars().alias("customer_id"),
            pl.col(config.date_column).str.strip_chars()
            .str.to_date(config.date_format, strict=False).alias("order_date"),
            pl.col(config.quantity_column).str.strip_chars().cast(pl.Float64, strict=False).alias("quantity"),
            pl.col(config.amount_column).str.strip_chars().cast(pl.Float64, strict=False).alias("amount"),
            order_number.alias("order_number"),
        )

    @staticmethod
    def _to_order(row: Dict[str, Any]) -> RawOrder:
        quantity = row["quantity"]
        unit_price = row["amount"] / quantity if quantity else 0.0
        return RawOrder(
            sku=row["sku"],
            collection_name=extract_collection_name(row["description"]),
            quantity=quantity,
            unit_price=unit_price,
            order_date=row["order_date"],
            customer_id=row["customer_id"],
            order_number=row["order_number"],
        )

    def load(self, config: SalesFileConfig) -> Tuple[List[RawOrder], LoadResult]:
        """
        Load a sales export.

        Rows without a parseable date, quantity or amount are counted as
        failed and skipped. A missing file or column fails the whole load.

        Returns:
            (orders, LoadResult)
        """
        file_path = Path(config.file_path)
        result = LoadResult(
            file_path=str(file_path),
            status=LoadStatus.FAILED,
            started_at=datetime.utcnow(),
        )
        logger.info("Starting sales export load", file=str(file_path))

        try:
            if not file_path.exists():
                raise FileNotFoundError(f"File not found: {file_path}")
            result.file_hash = _compute_file_hash(file_path)
            df = self._parse(self._read_csv(config), config)
        except (OSError, ValueError, pl.exceptions.PolarsError) as e:
            return [], _fail(result, e)

        parsed = df.filter(
            pl.col("order_date").is_not_null()
            & pl.col("quantity").is_not_null()
            & pl.col("amount").is_not_null()
        )
        orders = [self._to_order(row) for row in parsed.iter_rows(named=True)]

        _finish(result, len(orders), len(df) - len(parsed))
        if result.rows_failed:
            logger.warning("Unparseable sales rows skipped", rows_failed=result.rows_failed, file=str(file_path))
        logger.info(
            "Sales export loaded",
            rows_loaded=result.rows_loaded,
            duration_seconds=result.load_duration_seconds,
        )
        return orders, result


def _parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    return date.fromisoformat(str(value)[:10])


def _to_display(item: Dict[str, Any]) -> DisplayRecord:
    return DisplayRecord(
        sku=item["sku"],
        collection_name=item["collectionName"],
        customer_id=item["customerId"],
        installed_at=_parse_date(item.get("installedAt")),
        status=DisplayStatus(item.get("status") or DisplayStatus.ACTIVE.value),
        last_verified_at=_parse_date(item.get("lastVerifiedAt")),
        faces=int(item.get("faces", 1)),
    )


def load_displays(path: Union[str, Path]) -> Tuple[List[DisplayRecord], LoadResult]:
    """
    Load the displays document: ``{"displays": [{customerId, sku, ...}]}``.

    Items with missing keys, bad dates or an unknown status count as failed.
    """
    file_path = Path(path)
    result = LoadResult(file_path=str(file_path), status=LoadStatus.FAILED, started_at=datetime.utcnow())

    try:
        with open(file_path, encoding="utf-8") as f:
            document = json.load(f)
        result.file_hash = _compute_file_hash(file_path)
    except (OSError, ValueError) as e:
        return [], _fail(result, e)

    displays: List[DisplayRecord] = []
    failed = 0
    for item in document.get("displays", []):
        try:
            displays.append(_to_display(item))
        except (KeyError, TypeError, ValueError) as e:
            failed += 1
            logger.warning("Unparseable display skipped", error=str(e), item_id=item.get("id"))

    _finish(result, len(displays), failed)
    logger.info("Displays loaded", rows_loaded=result.rows_loaded, rows_failed=failed)
    return displays, result


def write_sales_export(
    orders: Sequence[RawOrder],
    path: Union[str, Path],
    descriptions: Optional[Dict[str, str]] = None,
) -> None:
    """
    Write orders in the sales export layout read by SalesExportLoader.

    Args:
        descriptions: Item description per SKU; defaults to the collection name
    """
    descriptions = descriptions or {}
    pl.DataFrame(
        {
            "SKU": [o.sku for o in orders],
            "ItemDescription": [descriptions.get(o.sku, o.collection_name) for o in orders],
            "CustomerNo": [o.customer_id for o in orders],
            "PostingDate": [o.order_date.isoformat() for o in orders],
            "OrderQuantity": [float(o.quantity) for o in orders],
            "AmountExclVAT": [float(o.revenue) for o in orders],
            "DocumentNo": [o.order_number for o in orders],
        },
        schema={
            "SKU": pl.Utf8,
            "ItemDescription": pl.Utf8,
            "CustomerNo": pl.Utf8,
            "PostingDate": pl.Utf8,
            "OrderQuantity": pl.Float64,
            "AmountExclVAT": pl.Float64,
            "DocumentNo": pl.Utf8,
        },
    ).write_csv(path)


def write_displays(displays: Sequence[DisplayRecord], path: Union[str, Path]) -> None:
    """Write displays as the document read by load_displays"""
    items = [
        {
            "id": f"{d.customer_id}-{d.sku}-{i}",
            "customerId": d.customer_id,
            "sku": d.sku,
            "collectionName": d.collection_name,
            "installedAt": d.installed_at.isoformat() if d.installed_at else None,
            "status": d.status.value,
            "lastVerifiedAt": d.last_verified_at.isoformat() if d.last_verified_at else None,
            "faces": d.faces,
        }
        for i, d in enumerate(displays)
    ]
    with open(path, "w", encoding="utf-8") as f:
        json.dump({"displays": items}, f, indent=2)
