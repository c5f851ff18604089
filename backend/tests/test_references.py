"""
Tests for references, citation formatting and the literature matrix.
"""

from fastapi.testclient import TestClient

from factories import create_reference


def test_reference_list_is_wrapped(thesis_client: TestClient):
    reference = create_reference(thesis_client)

    data = thesis_client.get("/api/references").json()

    assert list(data) == ["references"]
    assert [r["id"] for r in data["references"]] == [reference["id"]]
    assert data["references"][0]["matrix_data"] == {}


def test_citation_in_each_style(thesis_client: TestClient):
    reference = create_reference(thesis_client)
    url = f"/api/references/{reference['id']}/citation"

    assert thesis_client.get(url).json() == {"style": "apa", "citation": "Doe, J. (2024). Title. Journal"}
    assert thesis_client.get(url, params={"style": "mla"}).json()["citation"] == 'Doe, J.. "Title." Journal, 2024.'
    assert thesis_client.get(url, params={"style": "chicago"}).json()["citation"] == 'Doe, J.. "Title." Journal (2024).'
    assert thesis_client.get(url, params={"style": "harvard"}).status_code == 400


def test_citation_uses_reference_style_by_default(thesis_client: TestClient):
    reference = create_reference(thesis_client, citation_style="mla")

    data = thesis_client.get(f"/api/references/{reference['id']}/citation").json()

    assert data["style"] == "mla"


def test_citation_fallbacks(thesis_client: TestClient):
    reference = create_reference(thesis_client, authors=[], year=None, source=None)

    citation = thesis_client.get(f"/api/references/{reference['id']}/citation").json()["citation"]

    assert citation == "Unknown Author (n.d.). Title. "


def test_export_references(thesis_client: TestClient):
    create_reference(thesis_client, title="First")
    create_reference(thesis_client, title="Second", authors=["Roe, R.", "Poe, E."], year=2020)

    response = thesis_client.get("/api/references/export", params={"style": "apa"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert 'attachment; filename="references-apa.txt"' == response.headers["content-disposition"]
    assert response.text == "Doe, J. (2024). First. Journal\n\nRoe, R., Poe, E. (2020). Second. Journal"


def test_update_and_delete_reference(thesis_client: TestClient):
    reference = create_reference(thesis_client)
    url = f"/api/references/{reference['id']}"

    data = thesis_client.patch(url, json={"notes": "Key paper", "tags": ["sleep"]}).json()
    assert data["notes"] == "Key paper"
    assert data["tags"] == ["sleep"]

    assert thesis_client.delete(url).status_code == 204
    assert thesis_client.get("/api/references").json() == {"references": []}


def test_matrix_columns(thesis_client: TestClient):
    assert thesis_client.post("/api/matrix/columns", json={"name": " Method "}).json() == ["Method"]
    assert thesis_client.post("/api/matrix/columns", json={"name": "Sample"}).json() == ["Method", "Sample"]
    assert thesis_client.post("/api/matrix/columns", json={"name": "Findings"}).status_code == 201

    response = thesis_client.post("/api/matrix/columns", json={"name": "Method"})
    assert response.status_code == 409
    assert thesis_client.get("/api/matrix").json()["columns"] == ["Method", "Sample", "Findings"]

    assert thesis_client.delete("/api/matrix/columns/Sample").json() == ["Method", "Findings"]
    assert thesis_client.delete("/api/matrix/columns/Sample").status_code == 404
    assert thesis_client.post("/api/matrix/columns", json={"name": "   "}).status_code == 400


def test_matrix_cells(thesis_client: TestClient):
    first = create_reference(thesis_client, title="First")
    create_reference(thesis_client, title="Second")
    thesis_client.post("/api/matrix/columns", json={"name": "Method"})

    response = thesis_client.put(
        "/api/matrix/cells", json={"reference_id": first["id"], "column": "Method", "value": "Survey"}
    )
    assert response.status_code == 200
    assert response.json()["matrix_data"] == {"Method": "Survey"}

    thesis_client.post("/api/matrix/columns", json={"name": "Sample"})
    rows = thesis_client.get("/api/matrix").json()["rows"]

    assert [row["title"] for row in rows] == ["First", "Second"]
    assert rows[0]["cells"] == {"Method": "Survey", "Sample": ""}
    assert rows[1]["cells"] == {"Method": "", "Sample": ""}


def test_matrix_cell_requires_known_column(thesis_client: TestClient):
    reference = create_reference(thesis_client)

    response = thesis_client.put(
        "/api/matrix/cells", json={"reference_id": reference["id"], "column": "Ghost", "value": "x"}
    )

    assert response.status_code == 400


def test_removed_column_value_returns_when_readded(thesis_client: TestClient):
    reference = create_reference(thesis_client)
    thesis_client.post("/api/matrix/columns", json={"name": "Method"})
    thesis_client.put("/api/matrix/cells", json={"reference_id": reference["id"], "column": "Method", "value": "RCT"})

    thesis_client.delete("/api/matrix/columns/Method")
    assert thesis_client.get("/api/matrix").json()["rows"][0]["cells"] == {}

    thesis_client.post("/api/matrix/columns", json={"name": "Method"})
    assert thesis_client.get("/api/matrix").json()["rows"][0]["cells"] == {"Method": "RCT"}


def test_remove_column_with_slash_in_name(thesis_client: TestClient):
    thesis_client.post("/api/matrix/columns", json={"name": "Method"})
    thesis_client.post("/api/matrix/columns", json={"name": "Sample/Population"})

    response = thesis_client.delete("/api/matrix/columns/Sample%2FPopulation")

    assert response.status_code == 200
    assert response.json() == ["Method"]
    assert thesis_client.get("/api/matrix").json()["columns"] == ["Method"]
