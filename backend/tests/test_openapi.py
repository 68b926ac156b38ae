from events_api.main import app


def test_openapi_documents_event_routes():
    schema = app.openapi()
    paths = schema["paths"]
    assert set(paths["/api/events"]) == {"get", "post"}
    assert set(paths["/api/events/{event_id}"]) == {"get", "put", "delete"}
    assert "get" in paths["/api/events/user/{email}"]


def test_openapi_uses_400_instead_of_422():
    schema = app.openapi()
    post = schema["paths"]["/api/events"]["post"]
    assert "422" not in post["responses"]
    assert post["responses"]["400"]["content"]["application/json"]["schema"] == {
        "$ref": "#/components/schemas/ErrorResponse"
    }
    assert "HTTPValidationError" not in schema["components"]["schemas"]


def test_openapi_uses_camel_case_fields():
    schema = app.openapi()
    properties = schema["components"]["schemas"]["EventResponse"]["properties"]
    assert {"shortDescription", "fullDescription", "imageUrl", "createdBy", "createdAt"} <= set(properties)
