from lab_booking.db.models import TestType


def test_catalog_lists_only_active_tests(client, make_lab_test):
    active = make_lab_test(name="Thyroid Profile")
    make_lab_test(name="Retired Panel", is_active=False)

    response = client.get("/tests")

    assert response.status_code == 200
    assert [test["id"] for test in response.json()] == [active.id]


def test_catalog_filters(client, make_lab_test):
    make_lab_test(name="Thyroid Profile", category="Hormones")
    make_lab_test(name="Home Sugar Check", category="Diabetes", test_type=TestType.HOME_TEST)
    make_lab_test(name="HbA1c", category="Diabetes")

    by_category = client.get("/tests?category=Diabetes").json()
    by_type = client.get("/tests?test_type=home_test").json()
    by_search = client.get("/tests?search=thyroid").json()

    assert {test["name"] for test in by_category} == {"Home Sugar Check", "HbA1c"}
    assert [test["name"] for test in by_type] == ["Home Sugar Check"]
    assert [test["name"] for test in by_search] == ["Thyroid Profile"]


def test_catalog_pagination_limit_offset(client, make_lab_test):
    make_lab_test(name="A Panel", category="Blood")
    make_lab_test(name="B Panel", category="Blood")

    paged = client.get("/tests?limit=1&offset=1")

    assert paged.status_code == 200
    assert [test["name"] for test in paged.json()] == ["B Panel"]
    assert client.get("/tests?limit=0").status_code == 422


def test_catalog_detail(client, make_lab_test):
    test = make_lab_test(name="Vitamin D", price="1200.00")
    inactive = make_lab_test(name="Retired Panel", is_active=False)

    detail = client.get(f"/tests/{test.id}")

    assert detail.status_code == 200
    assert detail.json()["price"] == "1200.00"
    assert detail.json()["test_type"] == "clinic_test"
    assert client.get(f"/tests/{inactive.id}").status_code == 404
    assert client.get("/tests/missing").status_code == 404
