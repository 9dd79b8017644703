from io import BytesIO

from conftest import MEMBER_ID, PROGRAM_ID, YEAR_ID
from openpyxl import Workbook

DELEGATE_CSV = (
    "firstName,lastName,email,phone,parentFirstName,parentLastName,parentEmail,parentPhone\n"
    "John,Doe,john@test.com,555-1234,Jane,Doe,parent@test.com,555-5678"
)


def _workbook_bytes() -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.append(["firstName", "lastName", "email", "phone"])
    ws.append(["# DELEGATE: firstName, lastName, email required"])
    ws.append(["Ann", "Lee", "ann@test.com", 5551234])
    ws.append([None, None, None, None])
    ws.append(["Bo", "Ray", "bo@test.com", None])
    stream = BytesIO()
    wb.save(stream)
    return stream.getvalue()


def test_template_download(app_client, stores):
    stores.references.program_groupings[PROGRAM_ID] = [{"id": "g-1", "name": "Lincoln"}]

    resp = app_client.get(f"/programs/{PROGRAM_ID}/bulk/template/staff")

    assert resp.status_code == 200
    assert resp.mimetype == "text/csv"
    assert "staff-template.csv" in resp.headers["Content-Disposition"]
    text = resp.get_data(as_text=True)
    assert text.splitlines()[0] == "firstName,lastName,email,phone,role,groupingName"
    assert "# Valid groupings: Lincoln" in text
    assert text.rstrip().endswith("# --- Enter your data below this line ---")


def test_delegate_template_parses_to_no_rows(app_client):
    from utils.csv_table import parse_csv

    resp = app_client.get(f"/programs/{PROGRAM_ID}/bulk/template/delegates")

    assert resp.status_code == 200
    assert "delegates-template.csv" in resp.headers["Content-Disposition"]
    assert parse_csv(resp.get_data(as_text=True)).is_empty


def test_template_rejects_unknown_kind(app_client):
    resp = app_client.get(f"/programs/{PROGRAM_ID}/bulk/template/parents")

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "InvalidKindError"


def test_options(app_client, stores):
    stores.references.program_parties[PROGRAM_ID] = [{"id": "p-1", "name": "Federalist"}]

    resp = app_client.get(f"/programs/{PROGRAM_ID}/bulk/options")

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["parties"] == [{"id": "p-1", "name": "Federalist"}]
    assert body["roles"] == ["administrator", "counselor", "coordinator", "volunteer"]


def test_preview_route(app_client):
    resp = app_client.post(
        f"/program-years/{YEAR_ID}/bulk/preview/delegates", json={"csvContent": DELEGATE_CSV}
    )

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["totalRows"] == 1
    assert body["newParents"] == 1
    assert body["preview"][0]["status"] == "new"


def test_preview_requires_content(app_client):
    resp = app_client.post(f"/program-years/{YEAR_ID}/bulk/preview/delegates", json={})

    assert resp.status_code == 400
    assert resp.get_json()["message"] == "csvContent is required"


def test_non_string_csv_content_is_a_bad_request(app_client):
    resp = app_client.post(
        f"/program-years/{YEAR_ID}/bulk/preview/delegates", json={"csvContent": 123}
    )

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "MissingContentError"


def test_preview_unknown_year(app_client):
    resp = app_client.post(
        "/program-years/missing/bulk/preview/delegates", json={"csvContent": DELEGATE_CSV}
    )

    assert resp.status_code == 404


def test_preview_empty_rows(app_client):
    resp = app_client.post(
        f"/program-years/{YEAR_ID}/bulk/preview/delegates",
        json={"csvContent": "firstName,lastName,email\n"},
    )

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "EmptyDataError"


def test_import_route_end_to_end(app_client, stores):
    resp = app_client.post(
        f"/program-years/{YEAR_ID}/bulk/import/delegates",
        json={"csvContent": DELEGATE_CSV, "sendEmails": False},
    )

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["success"] == 1
    assert body["usersCreated"] == 2
    assert body["parentsCreated"] == 1
    assert stores.delegates.find(YEAR_ID, "john@test.com") is not None


def test_import_route_reports_unconfigured_email_as_failed(app_client, monkeypatch):
    from config import settings

    monkeypatch.setattr(settings, "SMTP_HOST", "")
    resp = app_client.post(
        f"/program-years/{YEAR_ID}/bulk/import/delegates",
        json={"csvContent": "firstName,lastName,email\nJo,Do,jo@test.com", "sendEmails": True},
    )

    body = resp.get_json()
    assert body["success"] == 1
    assert body["emailsFailed"] == 1


def test_import_workbook_upload(app_client, stores):
    resp = app_client.post(
        f"/program-years/{YEAR_ID}/bulk/import/delegates",
        data={"file": (BytesIO(_workbook_bytes()), "roster.xlsx"), "sendEmails": "false"},
        content_type="multipart/form-data",
    )

    assert resp.status_code == 200
    assert resp.get_json()["success"] == 2
    ann = stores.delegates.find(YEAR_ID, "ann@test.com")
    assert ann.phone == "5551234"
    assert stores.delegates.find(YEAR_ID, "bo@test.com").phone is None


def test_csv_file_upload(app_client):
    resp = app_client.post(
        f"/program-years/{YEAR_ID}/bulk/preview/delegates",
        data={"file": (BytesIO(DELEGATE_CSV.encode("utf-8")), "roster.csv")},
        content_type="multipart/form-data",
    )

    assert resp.status_code == 200
    assert resp.get_json()["validRows"] == 1


def test_upload_rejects_other_file_types(app_client):
    resp = app_client.post(
        f"/program-years/{YEAR_ID}/bulk/preview/delegates",
        data={"file": (BytesIO(b"x"), "roster.pdf")},
        content_type="multipart/form-data",
    )

    assert resp.status_code == 400


def test_non_admin_is_forbidden(app_client):
    with app_client.session_transaction() as sess:
        sess["user_id"] = MEMBER_ID

    resp = app_client.post(
        f"/program-years/{YEAR_ID}/bulk/import/delegates", json={"csvContent": DELEGATE_CSV}
    )

    assert resp.status_code == 403


def test_anonymous_caller_is_rejected(app_client):
    with app_client.session_transaction() as sess:
        sess.clear()

    resp = app_client.get(f"/programs/{PROGRAM_ID}/bulk/options")

    assert resp.status_code == 401
    assert resp.get_json()["status"] == "error"
