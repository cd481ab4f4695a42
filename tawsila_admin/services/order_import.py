# tawsila_admin/services/order_import.py
"""
Bulk order import from CSV or Excel files.

Headers are auto-mapped through a synonym table (English, Arabic and Shopify
export headers), Shopify multi-line orders are forward-filled and grouped,
and every row is validated before it becomes a create-order payload.
"""
import io
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from tawsila_admin.core.http_client import ApiClient
from tawsila_admin.models.orders import CreateOrderRequest

logger = logging.getLogger(__name__)

EXPECTED_COLUMNS = (
    "customer_name",
    "customer_mobile",
    "customer_address",
    "governorate",
    "city",
    "product_name",
    "quantity",
    "unit_price",
    "payment_method",
    "vendor_notes",
)

HEADER_SYNONYMS = {
    # customer_name
    "customer name": "customer_name",
    "customer": "customer_name",
    "name": "customer_name",
    "billing name": "customer_name",
    "shipping name": "customer_name",
    "اسم العميل": "customer_name",
    "العميل": "customer_name",
    "الاسم": "customer_name",

    # customer_mobile
    "mobile": "customer_mobile",
    "phone": "customer_mobile",
    "customer mobile": "customer_mobile",
    "customer phone": "customer_mobile",
    "phone number": "customer_mobile",
    "mobile number": "customer_mobile",
    "shipping phone": "customer_mobile",
    "billing phone": "customer_mobile",
    "رقم الموبايل": "customer_mobile",
    "الموبايل": "customer_mobile",
    "رقم الهاتف": "customer_mobile",
    "الهاتف": "customer_mobile",

    # customer_address
    "address": "customer_address",
    "customer address": "customer_address",
    "delivery address": "customer_address",
    "shipping address1": "customer_address",
    "shipping street": "customer_address",
    "العنوان": "customer_address",
    "عنوان العميل": "customer_address",
    "عنوان التوصيل": "customer_address",

    # governorate
    "governorate": "governorate",
    "province": "governorate",
    "state": "governorate",
    "shipping province": "governorate",
    "shipping province name": "governorate",
    "المحافظة": "governorate",

    # city
    "city": "city",
    "shipping city": "city",
    "المدينة": "city",
    "المنطقة": "city",

    # product_name
    "product": "product_name",
    "product name": "product_name",
    "item": "product_name",
    "item name": "product_name",
    "lineitem name": "product_name",
    "المنتج": "product_name",
    "اسم المنتج": "product_name",

    # quantity
    "quantity": "quantity",
    "qty": "quantity",
    "lineitem quantity": "quantity",
    "الكمية": "quantity",

    # unit_price
    "price": "unit_price",
    "unit price": "unit_price",
    "price per unit": "unit_price",
    "lineitem price": "unit_price",
    "السعر": "unit_price",
    "سعر الوحدة": "unit_price",

    # payment_method
    "payment": "payment_method",
    "payment method": "payment_method",
    "financial status": "payment_method",
    "طريقة الدفع": "payment_method",
    "الدفع": "payment_method",

    # vendor_notes
    "notes": "vendor_notes",
    "vendor notes": "vendor_notes",
    "order notes": "vendor_notes",
    "ملاحظات": "vendor_notes",
    "ملاحظات المورد": "vendor_notes",
}

# Two or more of these headers mean the file is a Shopify export
SHOPIFY_MARKERS = ("Lineitem name", "Lineitem quantity", "Shipping Name", "Financial Status")

# Order-level Shopify fields, blank on the extra line-item rows of an order
SHOPIFY_ORDER_FIELDS = (
    "Shipping Name",
    "Shipping Phone",
    "Shipping Address1",
    "Shipping Address2",
    "Shipping Street",
    "Shipping City",
    "Shipping Province",
    "Shipping Province Name",
    "Shipping Zip",
    "Shipping Country",
    "Billing Name",
    "Billing Phone",
    "Payment Method",
    "Financial Status",
    "Notes",
    "Email",
    "Phone",
)

CARD_PAYMENT_HINTS = ("shopify payments", "stripe", "klarna", "paypal", "apple pay")

TEMPLATE_HEADERS = [
    "Customer Name", "Mobile", "Address", "Governorate", "City",
    "Product Name", "Quantity", "Unit Price", "Payment Method", "Notes",
]
TEMPLATE_SAMPLE_ROW = [
    "Ahmed Mohamed", "01012345678", "123 Main St, Nasr City", "Cairo", "Nasr City",
    "T-Shirt - Black - XL", "2", "350", "cash", "Handle with care",
]

INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")
FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


@dataclass
class ImportedOrderRow:
    row_id: str
    order_ref: str = ""
    customer_name: str = ""
    customer_mobile: str = ""
    customer_address: str = ""
    governorate: str = ""
    city: str = ""
    product_name: str = ""
    quantity: int = 1
    unit_price: float = 0.0
    payment_method: str = "cash"
    vendor_notes: str = ""
    governorate_id: Optional[int] = None
    city_id: Optional[int] = None
    errors: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.__dict__)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def parse_int(value: str, default: int) -> int:
    """Leading integer of the value (``"3 pcs"`` -> 3), default when there is none"""
    match = INT_PREFIX.match(value)
    return int(match.group(1)) if match else default


def parse_float(value: str, default: float) -> float:
    match = FLOAT_PREFIX.match(value)
    return float(match.group(1)) if match else default


# ---------------------------------------------------------------------------
# File parsing
# ---------------------------------------------------------------------------

def _frame_to_rows(df: pd.DataFrame) -> Tuple[List[str], List[Dict[str, str]]]:
    headers = [str(column) for column in df.columns]
    df.columns = headers
    rows = [
        {key: _text(value) for key, value in record.items()}
        for record in df.to_dict(orient="records")
    ]
    # Skip rows where every cell is empty
    rows = [row for row in rows if any(row.values())]
    return headers, rows


def parse_csv(content: bytes) -> Tuple[List[str], List[Dict[str, str]]]:
    df = pd.read_csv(
        io.BytesIO(content),
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=True,
        encoding="utf-8-sig",
    )
    return _frame_to_rows(df)


def parse_excel(content: bytes) -> Tuple[List[str], List[Dict[str, str]]]:
    """First sheet of an .xlsx/.xls workbook, every cell read as text"""
    sheets = pd.read_excel(io.BytesIO(content), sheet_name=None, dtype=str, keep_default_na=False)
    if not sheets:
        raise ValueError("Excel file contains no sheets")

    first_sheet = next(iter(sheets.values()))
    return _frame_to_rows(first_sheet)


def parse_import_file(filename: str, content: bytes) -> Tuple[List[str], List[Dict[str, str]]]:
    """Route to the correct parser based on file extension"""
    extension = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""

    if extension == "csv":
        return parse_csv(content)
    if extension in ("xlsx", "xls"):
        return parse_excel(content)

    raise ValueError(f"Unsupported file type: .{extension}")


# ---------------------------------------------------------------------------
# Column mapping
# ---------------------------------------------------------------------------

def auto_map_columns(headers: List[str]) -> Dict[str, Optional[str]]:
    """Map raw headers to expected column names; unknown headers map to None"""
    mapping = {}

    for header in headers:
        normalized = header.strip().lower()

        if normalized in EXPECTED_COLUMNS:
            mapping[header] = normalized
        else:
            mapping[header] = HEADER_SYNONYMS.get(normalized)

    return mapping


def is_shopify_export(headers: List[str]) -> bool:
    header_set = {header.strip() for header in headers}
    return sum(1 for marker in SHOPIFY_MARKERS if marker in header_set) >= 2


def _normalize_payment(row: Dict[str, str]) -> None:
    raw = (row.get("Payment Method") or row.get("Financial Status") or "").strip().lower()

    if any(hint in raw for hint in CARD_PAYMENT_HINTS) or raw == "paid":
        normalized = "card"
    elif "cash" in raw or raw == "cod":
        normalized = "cash"
    else:
        # Anything else is left for the user to fix in the preview
        return

    row["Payment Method"] = normalized
    if "Financial Status" in row:
        row["Financial Status"] = normalized


def preprocess_shopify_rows(rows: List[Dict[str, str]]) -> List[Dict[str, str]]:
    """
    Prepare Shopify export rows in place:

    1. Forward-fill order-level fields from the first row of each order
       (Shopify leaves them blank on extra line-item rows).
    2. Join Shipping Address1 and Shipping Address2.
    3. Normalize payment values to ``card``/``cash``.
    """
    last_order: Optional[Dict[str, str]] = None

    for row in rows:
        order_name = (row.get("Name") or "").strip()

        # Shopify may repeat the Name on every line-item row of an order
        if order_name and (last_order is None or order_name != last_order["Name"]):
            last_order = {
                name: (row.get(name) or "").strip()
                for name in SHOPIFY_ORDER_FIELDS
                if (row.get(name) or "").strip()
            }
            last_order["Name"] = order_name
        elif last_order:
            for name in SHOPIFY_ORDER_FIELDS:
                if not (row.get(name) or "").strip() and last_order.get(name):
                    row[name] = last_order[name]
            row["Name"] = last_order["Name"]

    for row in rows:
        address1 = (row.get("Shipping Address1") or "").strip()
        address2 = (row.get("Shipping Address2") or "").strip()
        if address1 and address2:
            row["Shipping Address1"] = f"{address1}, {address2}"

    for row in rows:
        _normalize_payment(row)

    return rows


def map_rows_to_orders(
        raw_rows: List[Dict[str, str]],
        mapping: Dict[str, Optional[str]],
        headers: List[str]
) -> List[ImportedOrderRow]:
    """Convert raw rows into ImportedOrderRow objects using the column mapping"""
    shopify = is_shopify_export(headers)
    if shopify:
        preprocess_shopify_rows(raw_rows)

    rows = []
    for index, raw in enumerate(raw_rows):
        row = ImportedOrderRow(
            row_id=f"import-{index}",
            order_ref=(raw.get("Name") or "").strip() if shopify else "",
        )

        filled = set()
        for header, column in mapping.items():
            # Shopify's Name column is the order number, not the customer
            if not column or (shopify and header.strip() == "Name"):
                continue
            value = _text(raw.get(header))

            if column == "quantity":
                row.quantity = parse_int(value, 1)
            elif column == "unit_price":
                row.unit_price = parse_float(value, 0.0)
            elif value and column not in filled:
                # Several headers can feed one column, the first non-empty one wins
                setattr(row, column, value)
                filled.add(column)

        rows.append(row)

    return rows


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def validate_order_row(row: ImportedOrderRow) -> bool:
    """Validate a single row; errors are stored on the row"""
    errors = {}

    if not row.customer_name.strip():
        errors["customer_name"] = "required"
    if not row.customer_mobile.strip():
        errors["customer_mobile"] = "required"
    if not row.customer_address.strip():
        errors["customer_address"] = "required"
    if not row.product_name.strip():
        errors["product_name"] = "required"
    if row.quantity < 1:
        errors["quantity"] = "min1"
    if row.unit_price < 0:
        errors["unit_price"] = "minZero"

    row.errors = errors
    return not errors


def validate_all_rows(rows: List[ImportedOrderRow]) -> int:
    """Validate every row and return how many have errors"""
    return sum(1 for row in rows if not validate_order_row(row))


def resolve_location_ids(
        rows: List[ImportedOrderRow],
        governorates: List[Dict[str, Any]],
        cities: List[Dict[str, Any]]
) -> None:
    """Match governorate and city names (English or Arabic) to platform ids"""

    def names(record: Dict[str, Any]) -> set:
        return {
            _text(record.get(key)).lower()
            for key in ("name", "name_en", "name_ar")
            if _text(record.get(key))
        }

    for row in rows:
        governorate_name = row.governorate.strip().lower()
        city_name = row.city.strip().lower()

        governorate = next(
            (g for g in governorates if governorate_name and governorate_name in names(g)), None
        )
        row.governorate_id = governorate.get("id") if governorate else None

        candidates = [
            c for c in cities
            if governorate is None or c.get("governorate_id") in (None, governorate.get("id"))
        ]
        city = next((c for c in candidates if city_name and city_name in names(c)), None)
        row.city_id = city.get("id") if city else None


# ---------------------------------------------------------------------------
# Payload building
# ---------------------------------------------------------------------------

def build_payload(rows: List[ImportedOrderRow]) -> List[CreateOrderRequest]:
    """
    Group rows by order reference so that multi-item Shopify orders become a
    single order. Rows without a reference are standalone orders.
    """
    grouped: Dict[str, List[ImportedOrderRow]] = {}
    for row in rows:
        grouped.setdefault(row.order_ref or row.row_id, []).append(row)

    orders = []
    for group in grouped.values():
        first = group[0]
        orders.append(CreateOrderRequest(
            customer={
                "name": first.customer_name,
                "mobile": first.customer_mobile,
                "address": first.customer_address,
                "governorate_id": first.governorate_id,
                "city_id": first.city_id,
            },
            items=[
                {
                    "product_name": row.product_name,
                    "quantity": row.quantity,
                    "unit_price": row.unit_price,
                }
                for row in group
            ],
            payment_method=first.payment_method or "cod",
            vendor_notes=first.vendor_notes or None,
        ))

    return orders


def preview_rows(
        headers: List[str],
        raw_rows: List[Dict[str, str]],
        governorates: Optional[List[Dict[str, Any]]] = None,
        cities: Optional[List[Dict[str, Any]]] = None
) -> Dict[str, Any]:
    """Map and validate already parsed rows without sending anything"""
    mapping = auto_map_columns(headers)
    rows = map_rows_to_orders(raw_rows, mapping, headers)
    error_count = validate_all_rows(rows)

    if governorates is not None:
        resolve_location_ids(rows, governorates, cities or [])

    return {
        "headers": headers,
        "mapping": mapping,
        "shopify": is_shopify_export(headers),
        "rows": [row.to_dict() for row in rows],
        "error_count": error_count,
    }


async def import_orders(
        client: ApiClient,
        orders: List[CreateOrderRequest],
        approve_duplicates: bool = False
) -> Dict[str, Any]:
    """
    Submit grouped orders in one call. When the platform detects duplicates
    it answers with requires_confirmation and the call has to be repeated
    with approve_duplicates.
    """
    response = await client.post(
        "/orders/import",
        json={
            "orders": [order.model_dump(exclude_none=True) for order in orders],
            "approve_duplicates": approve_duplicates,
        },
    )
    result = response.get("data") if isinstance(response.get("data"), dict) else response

    logger.info(
        f"Imported {result.get('success_count', 0)} of {len(orders)} orders "
        f"({len(result.get('warnings') or [])} warnings)"
    )
    return result


# ---------------------------------------------------------------------------
# Template generation
# ---------------------------------------------------------------------------

def generate_template(format: str = "csv") -> Tuple[bytes, str]:
    """Blank import template with one sample row, returns (content, filename)"""
    df = pd.DataFrame([TEMPLATE_SAMPLE_ROW], columns=TEMPLATE_HEADERS)

    if format.lower() == "csv":
        # BOM so that Excel opens Arabic text correctly
        return df.to_csv(index=False).encode("utf-8-sig"), "orders-template.csv"

    elif format.lower() == "xlsx":
        output = io.BytesIO()
        df.to_excel(output, index=False, sheet_name="Orders")
        output.seek(0)
        return output.getvalue(), "orders-template.xlsx"

    else:
        raise ValueError(f"Unsupported template format: {format}")
