import pytest

from food_delivery import crud
from food_delivery.database import seed_sample_data
from food_delivery.errors import NotFound
from food_delivery.models import Restaurant

RATING_ORDER = ["3", "2", "4", "1", "5", "6"]


def test_seed_only_runs_on_empty_catalog(db):
    assert seed_sample_data(db) is False
    assert len(crud.list_restaurants(db)) == 6


def test_list_restaurants_orders_by_rating(db):
    restaurants = crud.list_restaurants(db)
    assert [restaurant.id for restaurant in restaurants] == RATING_ORDER


def test_empty_search_matches_listing(db):
    listed = [restaurant.id for restaurant in crud.list_restaurants(db)]
    assert [restaurant.id for restaurant in crud.search_restaurants(db, "")] == listed
    assert [restaurant.id for restaurant in crud.search_restaurants(db, "   ")] == listed


def test_search_matches_name_or_cuisine_case_insensitively(db):
    assert [r.name for r in crud.search_restaurants(db, "pizza")] == ["Pizza Palace"]
    assert [r.name for r in crud.search_restaurants(db, "NIGERIAN")] == ["Open sharaton"]
    assert {r.name for r in crud.search_restaurants(db, "burger")} == {"Burger Hut"}


def test_search_without_match_is_empty(db):
    assert crud.search_restaurants(db, "sushi bar") == []


def test_search_treats_wildcards_literally(db):
    db.add(Restaurant(id="7", name="100% Vegan", cuisine="Plant based", rating=4))
    db.commit()
    assert [r.id for r in crud.search_restaurants(db, "%")] == ["7"]
    assert crud.search_restaurants(db, "_x_") == []


def test_get_restaurant(db):
    assert crud.get_restaurant(db, "1").name == "Pizza Palace"
    with pytest.raises(NotFound):
        crud.get_restaurant(db, "missing")


def test_menu_items_for_restaurant(db):
    items = crud.list_menu_items(db, "1")
    assert {item.id for item in items} == {"m1", "m2", "m3"}
    assert crud.list_menu_items(db, "missing") == []


def test_get_menu_item_requires_matching_restaurant(db):
    assert crud.get_menu_item(db, "1", "m1").name == "Margherita Pizza"
    with pytest.raises(NotFound):
        crud.get_menu_item(db, "2", "m1")


class TestCatalogApi:
    def test_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_list_restaurants(self, client):
        response = client.get("/api/restaurants")
        assert response.status_code == 200
        data = response.json()
        assert [restaurant["id"] for restaurant in data] == RATING_ORDER
        assert data[0]["rating"] == 4.8
        assert data[0]["delivery_time"] == "30-40 min"

    def test_search_route_is_not_shadowed_by_id_route(self, client):
        response = client.get("/api/restaurants/search", params={"q": "pizza"})
        assert response.status_code == 200
        assert [restaurant["name"] for restaurant in response.json()] == ["Pizza Palace"]

    def test_search_without_query_returns_everything(self, client):
        response = client.get("/api/restaurants/search")
        assert response.status_code == 200
        assert [restaurant["id"] for restaurant in response.json()] == RATING_ORDER

    def test_get_restaurant_not_found(self, client):
        response = client.get("/api/restaurants/999")
        assert response.status_code == 404
        assert response.json()["detail"] == "Restaurant not found"

    def test_menu(self, client):
        response = client.get("/api/restaurants/2/menu")
        assert response.status_code == 200
        assert {item["id"] for item in response.json()} == {"m4", "m5"}
        assert client.get("/api/restaurants/999/menu").json() == []

    def test_menu_item(self, client):
        response = client.get("/api/restaurants/1/menu/m1")
        assert response.status_code == 200
        assert response.json()["price"] == 12.99
        assert client.get("/api/restaurants/1/menu/m4").status_code == 404
