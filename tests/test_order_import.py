import io

import pandas as pd
import pytest

from tawsila_admin.services import order_import
from tawsila_admin.services.order_import import ImportedOrderRow

SIMPLE_CSV = (
    "Customer Name,Mobile,Address,Governorate,City,Product,Qty,Price,Payment Method,Notes\n"
    "Sara,0100,Street 1,Cairo,Nasr City,Mug,2,50.5,cash,fragile\n"
    ",,,,,,,,,\n"
    "Omar,0111,Street 2,Giza,Dokki,Plate,abc,,,\n"
).encode("utf-8")

SHOPIFY_CSV = (
    "Name,Email,Financial Status,Lineitem quantity,Lineitem name,Lineitem price,"
    "Billing Name,Shipping Name,Shipping Address1,Shipping Address2,Shipping City,"
    "Shipping Province Name,Shipping Phone,Payment Method,Notes\n"
    "#1001,a@b.c,paid,1,Shirt,200,Mona,Mona Ali,Street 5,Flat 3,Maadi,Cairo,0122,Shopify Payments,\n"
    "#1001,,,2,Socks,30,,,,,,,,,\n"
    "#1002,c@d.e,pending,1,Hat,80,,Youssef,Street 9,,Dokki,Giza,0155,Cash on Delivery (COD),ring twice\n"
).encode("utf-8")


def test_auto_map_columns():
    mapping = order_import.auto_map_columns(["Customer Name", " QTY ", "السعر", "customer_mobile", "Colour"])

    assert mapping == {
        "Customer Name": "customer_name",
        " QTY ": "quantity",
        "السعر": "unit_price",
        "customer_mobile": "customer_mobile",
        "Colour": None,
    }


def test_parse_csv_skips_blank_rows_and_keeps_text():
    headers, rows = order_import.parse_import_file("orders.CSV", SIMPLE_CSV)

    assert headers[0] == "Customer Name"
    assert len(rows) == 2
    assert rows[0]["Mobile"] == "0100"


def test_parse_csv_with_bom():
    headers, _ = order_import.parse_import_file("orders.csv", "\ufeffName,Mobile\nA,1\n".encode("utf-8"))
    assert headers == ["Name", "Mobile"]


def test_parse_xlsx():
    output = io.BytesIO()
    pd.DataFrame([["Sara", "0100"]], columns=["Customer Name", "Mobile"]).to_excel(output, index=False)

    headers, rows = order_import.parse_import_file("orders.xlsx", output.getvalue())

    assert headers == ["Customer Name", "Mobile"]
    assert rows == [{"Customer Name": "Sara", "Mobile": "0100"}]


def test_unsupported_extension():
    with pytest.raises(ValueError, match="Unsupported file type: .pdf"):
        order_import.parse_import_file("orders.pdf", b"")


def test_map_rows_defaults():
    headers, raw_rows = order_import.parse_import_file("orders.csv", SIMPLE_CSV)
    rows = order_import.map_rows_to_orders(raw_rows, order_import.auto_map_columns(headers), headers)

    sara, omar = rows
    assert sara.quantity == 2
    assert sara.unit_price == 50.5
    assert sara.vendor_notes == "fragile"
    assert sara.order_ref == ""
    assert omar.quantity == 1
    assert omar.unit_price == 0.0
    assert omar.payment_method == "cash"


def test_parse_numbers_like_leading_prefix():
    assert order_import.parse_int("3 pcs", 1) == 3
    assert order_import.parse_int("x3", 1) == 1
    assert order_import.parse_float("12.5 EGP", 0.0) == 12.5
    assert order_import.parse_float("", 0.0) == 0.0


def test_shopify_detection():
    assert order_import.is_shopify_export(["Name", "Lineitem name", "Shipping Name"])
    assert not order_import.is_shopify_export(["Name", "Lineitem name"])


def test_shopify_rows_are_forward_filled_and_grouped():
    headers, raw_rows = order_import.parse_import_file("export.csv", SHOPIFY_CSV)
    rows = order_import.map_rows_to_orders(raw_rows, order_import.auto_map_columns(headers), headers)

    first, second, third = rows
    assert first.order_ref == second.order_ref == "#1001"
    assert first.customer_name == "Mona"
    assert second.customer_name == "Mona"
    assert second.customer_mobile == "0122"
    assert first.customer_address == "Street 5, Flat 3"
    assert second.customer_address == "Street 5, Flat 3"
    assert second.product_name == "Socks"
    assert second.quantity == 2
    assert first.payment_method == "card"
    assert third.customer_name == "Youssef"
    assert third.payment_method == "cash"
    assert third.vendor_notes == "ring twice"

    assert order_import.validate_all_rows(rows) == 0

    orders = order_import.build_payload(rows)
    assert len(orders) == 2
    assert [item.product_name for item in orders[0].items] == ["Shirt", "Socks"]
    assert orders[1].vendor_notes == "ring twice"


def test_validate_order_row_codes():
    row = ImportedOrderRow(row_id="r1", customer_name=" ", quantity=0, unit_price=-1)

    assert order_import.validate_order_row(row) is False
    assert row.errors == {
        "customer_name": "required",
        "customer_mobile": "required",
        "customer_address": "required",
        "product_name": "required",
        "quantity": "min1",
        "unit_price": "minZero",
    }


def test_build_payload_single_orders_and_defaults():
    rows = [
        ImportedOrderRow(row_id="a", customer_name="A", customer_mobile="1", customer_address="X",
                         product_name="P", payment_method=""),
        ImportedOrderRow(row_id="b", customer_name="B", customer_mobile="2", customer_address="Y",
                         product_name="Q", vendor_notes="note"),
    ]

    orders = order_import.build_payload(rows)

    assert len(orders) == 2
    assert orders[0].payment_method == "cod"
    assert orders[0].vendor_notes is None
    assert orders[1].payment_method == "cash"
    assert orders[1].vendor_notes == "note"


def test_resolve_location_ids():
    rows = [
        ImportedOrderRow(row_id="a", governorate="cairo", city="Nasr City"),
        ImportedOrderRow(row_id="b", governorate="الجيزة", city="Unknown"),
        ImportedOrderRow(row_id="c", governorate="Atlantis", city="Nasr City"),
    ]
    governorates = [
        {"id": 1, "name_en": "Cairo", "name_ar": "القاهرة"},
        {"id": 2, "name_en": "Giza", "name_ar": "الجيزة"},
    ]
    cities = [
        {"id": 10, "governorate_id": 1, "name_en": "Nasr City"},
        {"id": 20, "governorate_id": 2, "name_en": "Nasr City"},
    ]

    order_import.resolve_location_ids(rows, governorates, cities)

    assert (rows[0].governorate_id, rows[0].city_id) == (1, 10)
    assert (rows[1].governorate_id, rows[1].city_id) == (2, None)
    assert (rows[2].governorate_id, rows[2].city_id) == (None, 10)


def test_preview_rows_resolves_locations():
    headers, raw_rows = order_import.parse_import_file("orders.csv", SIMPLE_CSV)

    preview = order_import.preview_rows(headers, raw_rows, governorates=[{"id": 1, "name": "Cairo"}])

    assert preview["shopify"] is False
    assert preview["error_count"] == 0
    assert preview["rows"][0]["governorate_id"] == 1
    assert preview["rows"][1]["governorate_id"] is None


@pytest.mark.anyio
async def test_import_orders_posts_grouped_orders(api, platform):
    platform.add("POST", "/orders/import", json={
        "data": {"success_count": 0, "warnings": ["duplicate"], "requires_confirmation": True},
    })
    rows = [ImportedOrderRow(row_id="a", customer_name="A", customer_mobile="1",
                             customer_address="X", product_name="P", quantity=3, unit_price=9)]

    result = await order_import.import_orders(api, order_import.build_payload(rows), approve_duplicates=True)

    assert result["requires_confirmation"] is True
    assert platform.body() == {
        "orders": [{
            "customer": {"name": "A", "mobile": "1", "address": "X"},
            "items": [{"product_name": "P", "quantity": 3, "unit_price": 9.0}],
            "payment_method": "cash",
        }],
        "approve_duplicates": True,
    }


@pytest.mark.parametrize("format, filename", [("csv", "orders-template.csv"), ("xlsx", "orders-template.xlsx")])
def test_generate_template_round_trips_through_parser(format, filename):
    content, name = order_import.generate_template(format)

    assert name == filename
    headers, rows = order_import.parse_import_file(name, content)
    mapping = order_import.auto_map_columns(headers)
    assert None not in mapping.values()
    assert rows[0]["Customer Name"] == "Ahmed Mohamed"


def test_generate_template_rejects_other_formats():
    with pytest.raises(ValueError):
        order_import.generate_template("pdf")
