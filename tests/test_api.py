"""
End-to-end flows through the HTTP API with in-memory repositories.
"""

import io

import pytest
from PIL import Image

from clinicrx.core.config import reset_settings

from conftest import BROKEN_IMAGE, DOCTOR, LOGO_SVG, STAFF, png_bytes, png_data_url


def register_patient(client, **overrides):
    body = {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "date_of_birth": "1990-01-02",
        "gender": "female",
        "contact_number": "555-010-0100",
    }
    body.update(overrides)
    response = client.post("/patients", json=body, headers=STAFF)
    assert response.status_code == 201, response.text
    return response.json()["data"]


def create_prescription(client, patient_id, image_url=None, **extra):
    body = {"patient_id": patient_id, "image_url": image_url or png_data_url(), **extra}
    response = client.post("/prescriptions", json=body, headers=DOCTOR)
    assert response.status_code == 201, response.text
    return response.json()["data"]


# -----------------------------------------------------------------------------
# Patients
# -----------------------------------------------------------------------------


def test_register_and_fetch_patient(client):
    patient = register_patient(client)
    assert patient["mr_number"].startswith("MR-")
    assert patient["full_name"] == "Ada Lovelace"

    response = client.get(f"/patients/{patient['patient_id']}", headers=STAFF)
    assert response.status_code == 200
    assert response.json()["data"]["mr_number"] == patient["mr_number"]

    listing = client.get("/patients", headers=STAFF).json()["data"]
    assert [p["patient_id"] for p in listing["patients"]] == [patient["patient_id"]]


def test_patient_search(client):
    ada = register_patient(client)
    grace = register_patient(client, first_name="Grace", last_name="Hopper", contact_number="555-777-1234")

    def search(q):
        listing = client.get("/patients", params={"q": q}, headers=STAFF).json()["data"]
        return {p["patient_id"] for p in listing["patients"]}

    assert search("LOVE") == {ada["patient_id"]}
    assert search("grace") == {grace["patient_id"]}
    assert search("777-12") == {grace["patient_id"]}
    assert search(ada["mr_number"].lower()) == {ada["patient_id"]}
    assert search("nobody") == set()
    assert search("  ") == {ada["patient_id"], grace["patient_id"]}


def test_register_patient_rejects_bad_contact(client):
    response = client.post(
        "/patients",
        json={
            "first_name": "Ada",
            "last_name": "Lovelace",
            "date_of_birth": "1990-01-02",
            "gender": "female",
            "contact_number": "abcdefgh",
        },
        headers=STAFF,
    )
    assert response.status_code == 400
    assert response.json()["error"] == "INVALID_PATIENT_DATA"


def test_register_patient_validation_error(client):
    response = client.post("/patients", json={"first_name": "Ada"}, headers=STAFF)
    assert response.status_code == 422
    assert response.json()["error"] == "INVALID_INPUT"


def test_unknown_patient(client):
    response = client.get("/patients/missing", headers=STAFF)
    assert response.status_code == 404
    assert response.json()["error"] == "PATIENT_NOT_FOUND"


def test_medical_history(client):
    patient = register_patient(client)
    response = client.post(
        f"/patients/{patient['patient_id']}/medical-history",
        json={"diagnosis": "Hypertension", "date": "2024-02-01"},
        headers=DOCTOR,
    )
    assert response.status_code == 201
    history = response.json()["data"]["medical_history"]
    assert history[0]["diagnosis"] == "Hypertension"


# -----------------------------------------------------------------------------
# Drawing to prescription
# -----------------------------------------------------------------------------


def test_draw_then_save_prescription(client):
    patient = register_patient(client)

    session = client.post("/drawings", json={"width": 300, "height": 400}, headers=DOCTOR).json()["data"]
    assert session["state"] == "ready"
    session_id = session["session_id"]

    events = [
        {"kind": "down", "x": 10, "y": 10},
        {"kind": "move", "x": 100, "y": 120, "pointer_type": "touch"},
        {"kind": "up"},
    ]
    response = client.post(f"/drawings/{session_id}/events", json={"events": events}, headers=DOCTOR)
    data = response.json()["data"]
    assert data["state"] == "ready"
    assert data["outcomes"][1] == {"handled": True, "default_prevented": True}

    snapshot = client.get(f"/drawings/{session_id}/snapshot", headers=DOCTOR)
    assert snapshot.headers["content-type"] == "image/png"
    assert Image.open(io.BytesIO(snapshot.content)).size == (300, 400)

    data_url = client.get(f"/drawings/{session_id}/snapshot/data-url", headers=DOCTOR).json()["data"]["data_url"]
    assert data_url.startswith("data:image/png;base64,")

    prescription = create_prescription(
        client, patient["patient_id"], image_url=data_url, fee=40, discount=5, diagnosis="Flu"
    )
    assert prescription["doctor_id"] == "dr-house"
    assert prescription["amount_due"] == 35

    assert client.delete(f"/drawings/{session_id}", headers=DOCTOR).status_code == 200
    assert client.get(f"/drawings/{session_id}/snapshot", headers=DOCTOR).status_code == 404


def test_prescription_requires_image(client):
    patient = register_patient(client)
    response = client.post("/prescriptions", json={"patient_id": patient["patient_id"]}, headers=DOCTOR)
    assert response.status_code == 400
    assert response.json()["error"] == "MISSING_SOURCE_IMAGE"


def test_prescription_for_unknown_patient(client):
    response = client.post(
        "/prescriptions", json={"patient_id": "missing", "image_url": png_data_url()}, headers=DOCTOR
    )
    assert response.status_code == 404


# -----------------------------------------------------------------------------
# Composed outputs
# -----------------------------------------------------------------------------


def test_flattened_image_download(client):
    patient = register_patient(client)
    prescription = create_prescription(client, patient["patient_id"], date="2024-03-05")
    pid = prescription["prescription_id"]

    response = client.get(f"/prescriptions/{pid}/image", headers=STAFF)
    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    expected = f'attachment; filename="prescription-{patient["mr_number"]}-3-5-2024.png"'
    assert response.headers["content-disposition"] == expected
    assert response.headers["x-composition-generation"] == "1"
    assert response.headers["x-composition-current"] == "true"

    image = Image.open(io.BytesIO(response.content))
    # default header (60 + address + contact = 100) and footer (40 + info = 60) around the 600x800 source
    assert image.size == (600, 960)

    again = client.get(f"/prescriptions/{pid}/image", headers=STAFF)
    assert again.headers["x-composition-generation"] == "2"


def test_document_download(client):
    patient = register_patient(client)
    prescription = create_prescription(client, patient["patient_id"], date="2024-03-05")

    response = client.get(f"/prescriptions/{prescription['prescription_id']}/document", headers=STAFF)
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.content.startswith(b"%PDF")
    assert response.headers["x-page-count"] == "1"
    assert f"prescription-{patient['mr_number']}-3-5-2024.pdf" in response.headers["content-disposition"]


def test_print_page(client):
    patient = register_patient(client)
    prescription = create_prescription(client, patient["patient_id"], notes="Twice daily")

    response = client.get(f"/prescriptions/{prescription['prescription_id']}/print", headers=STAFF)
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert "Ada Lovelace" in response.text
    assert "Twice daily" in response.text
    assert "window.print();" in response.text


def test_preview(client):
    patient = register_patient(client)
    prescription = create_prescription(client, patient["patient_id"])
    client.put("/templates/header", json={"text": "Clinic A", "alignment": "right"}, headers=DOCTOR)

    data = client.get(f"/prescriptions/{prescription['prescription_id']}/preview", headers=STAFF).json()["data"]
    assert data["image_url"] == prescription["image_url"]
    assert data["header"]["lines"][0]["text"] == "Clinic A"
    assert data["header"]["style"]["text-align"] == "right"


def test_unknown_prescription_outputs(client):
    for suffix in ("image", "document", "print", "preview"):
        response = client.get(f"/prescriptions/missing/{suffix}", headers=STAFF)
        assert response.status_code == 404, suffix
        assert response.json()["error"] == "PRESCRIPTION_NOT_FOUND"


@pytest.mark.parametrize("suffix", ["image", "document"])
def test_undecodable_source_image(client, suffix):
    patient = register_patient(client)
    prescription = create_prescription(client, patient["patient_id"], image_url=BROKEN_IMAGE)

    response = client.get(f"/prescriptions/{prescription['prescription_id']}/{suffix}", headers=STAFF)
    assert response.status_code == 502
    body = response.json()
    assert body["error"] == "SOURCE_IMAGE_LOAD_FAILED"
    assert body["message"] == "Failed to load prescription image. Please try again."


# -----------------------------------------------------------------------------
# Payments
# -----------------------------------------------------------------------------


def test_payment_flow(client):
    patient = register_patient(client)
    prescription = create_prescription(client, patient["patient_id"], fee=25)
    pid = prescription["prescription_id"]

    response = client.post("/payments", json={"prescription_id": pid, "amount": 25, "method": "card"}, headers=STAFF)
    assert response.status_code == 201
    assert response.json()["data"]["created_by"] == "front-desk"

    assert client.get(f"/prescriptions/{pid}", headers=STAFF).json()["data"]["payment_status"] == "paid"

    payments = client.get(f"/patients/{patient['patient_id']}/payments", headers=STAFF).json()["data"]
    assert len(payments) == 1
    prescriptions = client.get(f"/patients/{patient['patient_id']}/prescriptions", headers=STAFF).json()["data"]
    assert [p["prescription_id"] for p in prescriptions] == [pid]


def test_payment_for_unknown_prescription(client):
    response = client.post("/payments", json={"prescription_id": "missing", "amount": 5}, headers=STAFF)
    assert response.status_code == 404


def test_delete_prescription(client):
    patient = register_patient(client)
    prescription = create_prescription(client, patient["patient_id"])
    pid = prescription["prescription_id"]
    assert client.delete(f"/prescriptions/{pid}", headers=DOCTOR).status_code == 200
    assert client.get(f"/prescriptions/{pid}", headers=STAFF).status_code == 404


# -----------------------------------------------------------------------------
# Templates
# -----------------------------------------------------------------------------


def test_header_update_and_toggles(client):
    response = client.put(
        "/templates/header",
        json={"text": "Sunrise Clinic", "address": "1 Main St", "font_size": "large"},
        headers=DOCTOR,
    )
    header = response.json()["data"]
    assert header["text"] == "Sunrise Clinic"
    assert header["font_size"] == "large"

    toggled = client.post("/templates/header/toggle-italic", headers=DOCTOR).json()["data"]
    assert toggled["italic"] is True
    assert client.get("/templates/header", headers=STAFF).json()["data"]["italic"] is True


def test_invalid_alignment_is_rejected(client):
    response = client.put("/templates/footer", json={"alignment": "justify"}, headers=DOCTOR)
    assert response.status_code == 400
    assert response.json()["error"] == "INVALID_TEMPLATE_VALUE"


def test_logo_upload_and_removal(client):
    files = {"file": ("logo.png", png_bytes((40, 40)), "image/png")}
    response = client.post("/templates/header/logo", files=files, headers=DOCTOR)
    assert response.status_code == 200
    header = response.json()["data"]
    assert header["has_logo"] is True
    assert header["logo"].startswith("data:image/png;base64,")

    removed = client.delete("/templates/header/logo", headers=DOCTOR).json()["data"]
    assert removed["has_logo"] is False


def test_logo_upload_rejects_unsupported_type(client):
    files = {"file": ("logo.gif", b"GIF89a", "image/gif")}
    response = client.post("/templates/header/logo", files=files, headers=DOCTOR)
    assert response.status_code == 422
    assert response.json()["error"] == "INVALID_UPLOAD"
    assert client.get("/templates/header", headers=STAFF).json()["data"]["has_logo"] is False


def test_logo_changes_flattened_header(client):
    patient = register_patient(client)
    prescription = create_prescription(client, patient["patient_id"])
    files = {"file": ("logo.png", png_bytes((40, 40)), "image/png")}
    client.post("/templates/header/logo", files=files, headers=DOCTOR)

    response = client.get(f"/prescriptions/{prescription['prescription_id']}/image", headers=STAFF)
    # logo header is 120 tall
    assert Image.open(io.BytesIO(response.content)).size == (600, 980)


def test_prescription_image_cannot_point_at_server_files(client, tmp_path):
    patient = register_patient(client)
    secret = tmp_path / "server_secret.png"
    secret.write_bytes(png_bytes((20, 20)))
    for image_url in (str(secret), f"file://{secret}", "http://169.254.169.254/latest/meta-data"):
        response = client.post(
            "/prescriptions", json={"patient_id": patient["patient_id"], "image_url": image_url}, headers=DOCTOR
        )
        assert response.status_code == 422, image_url
        assert response.json()["error"] == "INVALID_INPUT"


def test_logo_reference_must_be_data_url_or_allowed_host(client, tmp_path, monkeypatch):
    secret = tmp_path / "other.png"
    secret.write_bytes(png_bytes((20, 20)))
    response = client.put("/templates/header/logo", json={"logo": str(secret)}, headers=DOCTOR)
    assert response.status_code == 422
    assert client.get("/templates/header", headers=STAFF).json()["data"]["has_logo"] is False

    response = client.put("/templates/header/logo", json={"logo": "https://cdn.example.com/logo.png"}, headers=DOCTOR)
    assert response.status_code == 422

    monkeypatch.setenv("RENDER_IMAGE_ALLOWED_HOSTS", "cdn.example.com")
    reset_settings()
    response = client.put("/templates/header/logo", json={"logo": "https://cdn.example.com/logo.png"}, headers=DOCTOR)
    assert response.status_code == 200
    assert response.json()["data"]["logo"] == "https://cdn.example.com/logo.png"

    response = client.put("/templates/header/logo", json={"logo": png_data_url((20, 20))}, headers=DOCTOR)
    assert response.status_code == 200


def test_svg_logo_upload_renders_in_flattened_image(client):
    patient = register_patient(client)
    prescription = create_prescription(client, patient["patient_id"])
    files = {"file": ("logo.svg", LOGO_SVG.encode(), "image/svg+xml")}
    assert client.post("/templates/header/logo", files=files, headers=DOCTOR).status_code == 200

    response = client.get(f"/prescriptions/{prescription['prescription_id']}/image", headers=STAFF)
    assert Image.open(io.BytesIO(response.content)).size == (600, 980)
