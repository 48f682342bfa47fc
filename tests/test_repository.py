import pytest

import repository
from errors import NotFound, ValidationError
from schemas import Product


def test_add_category_assigns_id_and_lists_it():
    category = repository.add_category("Phones", "Mobile phones")
    assert isinstance(category["id"], int)
    assert category["createdAt"]
    assert category in repository.list_categories()


def test_add_category_requires_name():
    with pytest.raises(ValidationError):
        repository.add_category("  ")


def test_category_ids_are_unique():
    ids = {repository.add_category(f"c{i}")["id"] for i in range(5)}
    ids |= {c["id"] for c in repository.list_categories() if c["id"] <= 4}
    assert len(ids) == 9


def test_update_category_keeps_id():
    category = repository.add_category("Phones", "Mobile phones")
    updated = repository.update_category(category["id"], {"name": "Smartphones", "id": 99})
    assert updated["id"] == category["id"]
    assert updated["name"] == "Smartphones"
    assert updated["description"] == "Mobile phones"
    assert updated["updatedAt"]


def test_update_unknown_category():
    with pytest.raises(NotFound):
        repository.update_category(123, {"name": "x"})


def test_delete_category():
    category = repository.add_category("Temp")
    repository.delete_category(category["id"])
    assert all(c["id"] != category["id"] for c in repository.list_categories())
    with pytest.raises(NotFound):
        repository.delete_category(category["id"])


def test_product_defaults():
    product = repository.add_product({"name": "Account", "price": 1500})
    assert product["currency"] == "DA"
    assert product["status"] is True
    assert product["images"] == []
    assert repository.get_product(product["id"]) == product


def test_update_product_merges_and_keeps_images():
    product = repository.add_product({"name": "Account", "price": 10, "images": ["/uploads/a.jpg"]})
    updated = repository.update_product(product["id"], {"price": 12, "images": None})
    assert updated["price"] == 12
    assert updated["name"] == "Account"
    assert updated["images"] == ["/uploads/a.jpg"]


def test_update_unknown_product():
    with pytest.raises(NotFound):
        repository.update_product(404, {"name": "ghost"})


def test_delete_product():
    product = repository.add_product({"name": "Account", "price": 10})
    repository.delete_product(product["id"])
    assert repository.list_products() == []
    with pytest.raises(NotFound):
        repository.delete_product(product["id"])


def test_create_order_computes_total_and_forces_pending():
    order = repository.create_order({
        "items": [{"price": 100, "quantity": 2}],
        "customerName": "X",
        "phone": "0000",
        "status": "completed",
    })
    stored = repository.get_order(order["id"])
    assert stored["total"] == 200
    assert stored["status"] == "pending"
    analytics = repository.get_analytics()
    assert analytics["ordersCount"] == 0
    assert analytics["revenue"] == 0


def test_create_order_keeps_supplied_total():
    order = repository.create_order({"items": [{"price": 100, "quantity": 2}], "total": 150,
                                     "customerName": "X", "phone": "0000"})
    assert order["total"] == 150


def test_create_order_requires_customer():
    with pytest.raises(ValidationError):
        repository.create_order({"items": [], "phone": "0000"})


def test_order_status_drives_analytics():
    order = repository.create_order({"items": [{"price": 100, "quantity": 2}], "customerName": "X", "phone": "0000"})

    repository.update_order_status(order["id"], "completed")
    assert repository.get_analytics()["ordersCount"] == 1
    assert repository.get_analytics()["revenue"] == 200
    assert repository.dashboard_stats()["orders"] == 1

    repository.update_order_status(order["id"], "completed")
    assert repository.get_analytics()["ordersCount"] == 1

    repository.update_order_status(order["id"], "cancelled")
    analytics = repository.get_analytics()
    assert analytics["ordersCount"] == 0
    assert analytics["revenue"] == 0
    assert repository.get_order(order["id"])["status"] == "cancelled"


def test_update_status_of_unknown_order():
    with pytest.raises(NotFound):
        repository.update_order_status(1, "completed")


def test_update_settings_merges_nested_objects():
    before = repository.get_settings()
    settings = repository.update_settings({"storeName": "New name", "contact": {"phone": "123"}})
    assert settings["storeName"] == "New name"
    assert settings["contact"]["phone"] == "123"
    assert settings["contact"]["email"] == before["contact"]["email"]
    assert settings["currency"] == before["currency"]
    assert repository.get_settings() == settings


def test_track_visitor_and_stats():
    repository.track_visitor()
    repository.track_visitor()
    repository.add_product({"name": "A", "price": 1})
    stats = repository.dashboard_stats()
    assert stats == {"orders": 0, "products": 1, "visitors": 2, "revenue": 0}


def test_profile_hides_password_hash():
    assert "password" not in repository.get_profile()


def test_price_on_request_product_is_valid_record():
    product = repository.add_product({"name": "Account", "price": "PRV"})
    assert Product.model_validate(product).price == "PRV"


def test_update_product_rejects_blank_name():
    product = repository.add_product({"name": "Account", "price": 10})
    with pytest.raises(ValidationError):
        repository.update_product(product["id"], {"name": ""})
    assert repository.get_product(product["id"])["name"] == "Account"


def test_update_settings_ignores_null_nested_objects():
    repository.update_settings({"contact": {"phone": "123"}})
    settings = repository.update_settings({"contact": None, "logo": None})
    assert settings["contact"]["phone"] == "123"
    assert settings["logo"] is None
