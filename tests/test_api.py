"""Tests for the HTTP API."""


class TestCreate:
    def test_create_json(self, client, cusco_unido):
        response = client.post("/api/parties", json=cusco_unido)

        assert response.status_code == 201
        body = response.json()
        assert isinstance(body["id"], str) and len(body["id"]) == 18
        assert body["registeredAt"]
        assert body["logoUrl"] is None
        assert body["foundingDate"] == "2024-01-15"
        assert body["name"] == "Cusco Unido"
        assert body["active"] is True

    def test_create_normalizes_offset_datetime(self, client, cusco_unido):
        response = client.post(
            "/api/parties", json={**cusco_unido, "foundingDate": "2024-03-05T00:00:00-05:00"}
        )
        assert response.json()["foundingDate"] == "2024-03-05"

    def test_create_missing_fields(self, client):
        response = client.post("/api/parties", json={"name": "Cusco Unido"})

        assert response.status_code == 400
        body = response.json()
        assert set(body["errors"]) == {"abbreviation", "foundingDate", "headquarters"}
        assert client.get("/api/parties").json()["count"] == 0

    def test_create_rejects_non_object_body(self, client):
        response = client.post(
            "/api/parties", content=b"[1, 2]", headers={"content-type": "application/json"}
        )
        assert response.status_code == 400

        response = client.post(
            "/api/parties", content=b"{not json", headers={"content-type": "application/json"}
        )
        assert response.status_code == 400

    def test_create_multipart_with_logo(self, client, cusco_unido, png_bytes):
        response = client.post(
            "/api/parties",
            data=cusco_unido,
            files={"logo": ("logo.png", png_bytes, "image/png")},
        )

        assert response.status_code == 201
        logo_url = response.json()["logoUrl"]
        assert logo_url.startswith("/uploads/")

        fetched = client.get(logo_url)
        assert fetched.status_code == 200
        assert fetched.content == png_bytes

    def test_two_uploads_with_same_name(self, client, cusco_unido, png_bytes):
        refs = []
        for suffix in (b"1", b"2"):
            response = client.post(
                "/api/parties",
                data=cusco_unido,
                files={"logo": ("logo.png", png_bytes + suffix, "image/png")},
            )
            refs.append(response.json()["logoUrl"])

        assert refs[0] != refs[1]
        assert client.get(refs[0]).content == png_bytes + b"1"
        assert client.get(refs[1]).content == png_bytes + b"2"

    def test_all_problems_reported_at_once(self, client, cusco_unido):
        response = client.post(
            "/api/parties",
            data={**cusco_unido, "name": ""},
            files={"logo": ("logo.gif", b"GIF89a", "image/gif")},
        )

        assert response.status_code == 400
        assert set(response.json()["errors"]) == {"name", "logo"}

    def test_oversized_logo(self, client, cusco_unido):
        response = client.post(
            "/api/parties",
            data=cusco_unido,
            files={"logo": ("logo.png", b"x" * 4096, "image/png")},
        )
        assert response.status_code == 400
        assert "logo" in response.json()["errors"]


class TestReadUpdateDelete:
    def test_list_and_get(self, client, cusco_unido):
        created = client.post("/api/parties", json=cusco_unido).json()
        client.post("/api/parties", json={**cusco_unido, "name": "Otro", "ideology": "left"})

        listing = client.get("/api/parties").json()
        assert listing["count"] == 2
        assert listing["data"][1]["id"] == created["id"]

        filtered = client.get("/api/parties", params={"ideology": "left"}).json()
        assert [p["name"] for p in filtered["data"]] == ["Otro"]

        assert client.get(f"/api/parties/{created['id']}").json() == created

    def test_get_unknown(self, client):
        assert client.get("/api/parties/UNKNOWN").status_code == 404

    def test_update(self, client, cusco_unido, png_bytes):
        created = client.post(
            "/api/parties",
            data=cusco_unido,
            files={"logo": ("logo.png", png_bytes, "image/png")},
        ).json()

        response = client.put(
            f"/api/parties/{created['id']}",
            json={**cusco_unido, "headquarters": "Av. El Sol 123, Cusco"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["headquarters"] == "Av. El Sol 123, Cusco"
        assert body["logoUrl"] == created["logoUrl"]
        assert body["registeredAt"] == created["registeredAt"]

    def test_update_unknown(self, client, cusco_unido):
        response = client.put("/api/parties/UNKNOWN", json=cusco_unido)

        assert response.status_code == 404
        assert client.get("/api/parties").json()["count"] == 0

    def test_update_invalid(self, client, cusco_unido):
        created = client.post("/api/parties", json=cusco_unido).json()

        response = client.put(f"/api/parties/{created['id']}", json={**cusco_unido, "name": ""})

        assert response.status_code == 400
        assert response.json()["errors"] == {"name": "name is required."}

    def test_delete(self, client, cusco_unido):
        created = client.post("/api/parties", json=cusco_unido).json()

        response = client.delete(f"/api/parties/{created['id']}")

        assert response.status_code == 200
        assert response.json() == {"message": "party deleted"}
        assert client.get("/api/parties").json()["data"] == []
        assert client.delete(f"/api/parties/{created['id']}").status_code == 404

    def test_stats(self, client, cusco_unido):
        client.post("/api/parties", json={**cusco_unido, "ideology": "regionalist"})
        client.post("/api/parties", json=cusco_unido)

        assert client.get("/api/parties/stats").json() == {
            "total": 2,
            "byIdeology": {"regionalist": 1},
        }

    def test_missing_upload(self, client):
        assert client.get("/uploads/nothing.png").status_code == 404

    def test_upload_name_with_null_byte(self, client):
        assert client.get("/uploads/a%00b.png").status_code == 404


class TestCrossOrigin:
    def test_disallowed_origin_is_rejected(self, client, cusco_unido):
        response = client.post(
            "/api/parties", json=cusco_unido, headers={"Origin": "https://evil.example"}
        )

        assert response.status_code == 403
        assert client.get("/api/parties").json()["count"] == 0

    def test_allowed_origin(self, client, allowed_origin):
        response = client.get("/api/parties", headers={"Origin": allowed_origin})

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == allowed_origin

    def test_preflight_from_disallowed_origin(self, client):
        response = client.options(
            "/api/parties",
            headers={
                "Origin": "https://evil.example",
                "Access-Control-Request-Method": "POST",
            },
        )
        assert response.status_code == 403

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}


class TestOptions:
    def test_form_options(self, client):
        body = client.get("/api/options").json()

        assert {"value": "social_democrat", "label": "Social Democrat"} in body["ideologies"]
        assert len(body["ideologies"]) == 8
        assert body["colors"][0] == {"value": "#DC2626", "label": "Red"}
