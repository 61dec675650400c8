# catalog_dashboard/services/excel_service.py
import io
import logging

import pandas as pd

from services.errors import ValidationError
from services.import_service import ImportRow

logger = logging.getLogger(__name__)

# ImportRow field -> accepted column headers (compared lower-cased)
COLUMN_ALIASES = {
    "code": ["code", "kode", "sku", "kode produk"],
    "name": ["name", "nama", "nama produk", "product name"],
    "price": ["price", "harga"],
    "category": ["category", "kategori"],
    "description": ["description", "deskripsi", "keterangan"],
    "image_url": ["image", "image_url", "imageurl", "image url", "gambar", "url gambar"],
}

SUPPORTED_EXCEL = (".xlsx", ".xlsm")

EXPORT_COLUMNS = ["code", "name", "price", "category", "description"]


def resolve_columns(columns) -> dict:
    """Maps each ImportRow field to the first matching column of the sheet."""
    lookup = {}
    for column in columns:
        lookup.setdefault(str(column).strip().lower(), column)

    mapping = {}
    for field_name, aliases in COLUMN_ALIASES.items():
        for alias in aliases:
            if alias in lookup:
                mapping[field_name] = lookup[alias]
                break
    return mapping


def read_sheet(file, filename=None) -> pd.DataFrame:
    name = (filename or getattr(file, "name", "") or "").lower()
    if name.endswith(".csv"):
        return pd.read_csv(file, dtype=object)
    if name and not name.endswith(SUPPORTED_EXCEL):
        raise ValidationError(f"Unsupported file type: {name}. Upload an .xlsx or .csv file.")
    # First sheet only, as exported by export_to_excel
    return pd.read_excel(file, sheet_name=0, dtype=object, engine="openpyxl")


def rows_from_dataframe(df: pd.DataFrame) -> list:
    mapping = resolve_columns(df.columns)
    if "code" not in mapping:
        logger.warning(f"No code column found among {list(df.columns)}; every row will be skipped.")

    rows = []
    # +2: header is line 1 and the default index is 0-based
    for index, record in zip(df.index, df.to_dict(orient="records")):
        values = {}
        for field_name, column in mapping.items():
            value = record.get(column)
            values[field_name] = None if pd.isna(value) else value
        rows.append(ImportRow(line=int(index) + 2, **values))
    return rows


def parse_excel(file, filename=None) -> list:
    """
    Reads an uploaded .xlsx/.csv file into ImportRow objects.
    Raises ValidationError when the file cannot be read.
    :param file: path or file-like object (e.g. a Streamlit UploadedFile).
    :param filename: optional name used to detect CSV when `file` has none.
    """
    try:
        df = read_sheet(file, filename)
    except ValidationError:
        raise
    except Exception as e:
        # corrupt workbooks fail deep inside pandas/openpyxl with assorted errors
        logger.warning(f"Could not read spreadsheet {filename or getattr(file, 'name', '')}: {e}")
        raise ValidationError(f"The file could not be read as a spreadsheet: {e}") from e
    df = df.dropna(how="all")
    logger.info(f"Parsed {len(df)} row(s) from spreadsheet {filename or getattr(file, 'name', '')}.")
    return rows_from_dataframe(df)


def products_to_dataframe(products) -> pd.DataFrame:
    records = [{col: getattr(p, col) for col in EXPORT_COLUMNS} for p in products]
    return pd.DataFrame(records, columns=EXPORT_COLUMNS)


def export_to_excel(products) -> bytes:
    """Writes code/name/price/category/description to an in-memory .xlsx."""
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        products_to_dataframe(products).to_excel(writer, sheet_name="Products", index=False)
    return buffer.getvalue()
