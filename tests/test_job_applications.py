"""Tests for applications nested under job posts, including CV attachments."""
from __future__ import annotations

from conftest import create_job_post, sign_up, stored_files

PDF = b"%PDF-1.4 curriculum vitae"


def applications_url(job_post_id: int) -> str:
    return f"/job_posts/{job_post_id}/job_applications"


def apply(client, job_post_id: int, body: str = "I'd love to join", user_id=None, cv=None):
    data = {"body": body}
    if user_id is not None:
        data["user_id"] = str(user_id)
    files = {"cv": cv} if cv is not None else None
    return client.post(applications_url(job_post_id), data=data, files=files)


def test_apply_with_explicit_user(client) -> None:
    user = sign_up(client, "applicant@example.com")
    client.cookies.clear()
    post = create_job_post(client)

    response = apply(client, post["id"], body="Hire me", user_id=user["id"])

    assert response.status_code == 201, response.text
    application = response.json()
    assert application["job_post_id"] == post["id"]
    assert application["user_id"] == user["id"]
    assert application["has_cv"] is False
    assert response.headers["location"].endswith(
        f"/job_posts/{post['id']}/job_applications/{application['id']}"
    )

    listed = client.get(applications_url(post["id"])).json()
    assert [item["id"] for item in listed] == [application["id"]]


def test_signed_in_user_applies_as_themselves(client) -> None:
    user = sign_up(client, "self@example.com")
    post = create_job_post(client)

    response = apply(client, post["id"])

    assert response.status_code == 201
    assert response.json()["user_id"] == user["id"]


def test_blank_body_is_rejected_and_nothing_saved(client, upload_dir) -> None:
    user = sign_up(client, "blank@example.com")
    post = create_job_post(client)

    response = apply(client, post["id"], body="   ", user_id=user["id"], cv=("cv.pdf", PDF, "application/pdf"))

    assert response.status_code == 422
    payload = response.json()
    assert payload["form"]["errors"] == {"body": ["can't be blank"]}
    assert payload["form"]["messages"] == ["Body can't be blank"]
    assert payload["form"]["enctype"] == "multipart/form-data"
    assert client.get(applications_url(post["id"])).json() == []
    assert stored_files(upload_dir) == []


def test_anonymous_application_without_user_is_rejected(client) -> None:
    post = create_job_post(client)

    response = apply(client, post["id"])

    assert response.status_code == 422
    assert response.json()["form"]["errors"] == {"user": ["must exist"]}


def test_nonexistent_user_is_rejected(client) -> None:
    post = create_job_post(client)

    response = apply(client, post["id"], user_id=4242)

    assert response.status_code == 422
    assert response.json()["form"]["messages"] == ["User must exist"]


def test_apply_to_missing_post_is_not_found(client) -> None:
    user = sign_up(client, "lost@example.com")

    response = apply(client, 999, user_id=user["id"])

    assert response.status_code == 404
    assert response.json()["detail"] == "Job post not found"


def test_job_post_id_comes_from_url(client) -> None:
    user = sign_up(client, "url@example.com")
    first = create_job_post(client, title="First")
    second = create_job_post(client, title="Second")

    response = client.post(
        applications_url(first["id"]),
        data={"body": "Hello", "user_id": str(user["id"]), "job_post_id": str(second["id"])},
    )

    assert response.status_code == 201
    assert response.json()["job_post_id"] == first["id"]
    assert client.get(applications_url(second["id"])).json() == []


def test_application_under_wrong_post_is_not_found(client) -> None:
    user = sign_up(client, "wrong@example.com")
    first = create_job_post(client, title="First")
    second = create_job_post(client, title="Second")
    application = apply(client, first["id"], user_id=user["id"]).json()

    wrong = f"{applications_url(second['id'])}/{application['id']}"

    assert client.get(wrong).status_code == 404
    assert client.get(f"{wrong}/edit").status_code == 404
    assert client.patch(wrong, data={"body": "Moved"}).status_code == 404
    assert client.delete(wrong).status_code == 404
    assert client.get(f"{applications_url(first['id'])}/{application['id']}").status_code == 200


def test_forms(client) -> None:
    user = sign_up(client, "forms@example.com")
    post = create_job_post(client)

    blank = client.get(f"{applications_url(post['id'])}/new").json()
    assert blank["values"] == {"body": None, "user_id": None, "cv": None}
    assert blank["action"].endswith(applications_url(post["id"]))

    application = apply(client, post["id"], body="Pick me", cv=("resume.pdf", PDF, "application/pdf")).json()
    edit = client.get(f"{applications_url(post['id'])}/{application['id']}/edit").json()
    assert edit["method"] == "patch"
    assert edit["values"] == {"body": "Pick me", "user_id": user["id"], "cv": "resume.pdf"}

    assert client.get(f"{applications_url(999)}/new").status_code == 404


def test_update_keeps_omitted_fields(client) -> None:
    user = sign_up(client, "update@example.com")
    post = create_job_post(client)
    application = apply(client, post["id"], body="Before").json()
    url = f"{applications_url(post['id'])}/{application['id']}"

    response = client.patch(url, data={"body": "After"})

    assert response.status_code == 200
    assert response.json()["body"] == "After"
    assert response.json()["user_id"] == user["id"]

    invalid = client.put(url, data={"body": "  "})
    assert invalid.status_code == 422
    assert invalid.json()["form"]["errors"] == {"body": ["can't be blank"]}
    assert client.get(url).json()["body"] == "After"


def test_cv_upload_and_download(client, upload_dir) -> None:
    sign_up(client, "cv@example.com")
    post = create_job_post(client)

    created = apply(client, post["id"], cv=("resume.pdf", PDF, "application/pdf"))

    assert created.status_code == 201
    application = created.json()
    assert application["has_cv"] is True
    assert application["cv_filename"] == "resume.pdf"
    assert application["cv_content_type"] == "application/pdf"
    assert application["cv_byte_size"] == len(PDF)
    assert len(stored_files(upload_dir)) == 1

    download = client.get(f"{applications_url(post['id'])}/{application['id']}/cv")
    assert download.status_code == 200
    assert download.content == PDF
    assert download.headers["content-type"] == "application/pdf"
    assert "resume.pdf" in download.headers["content-disposition"]


def test_download_without_cv_is_not_found(client) -> None:
    sign_up(client, "nocv@example.com")
    post = create_job_post(client)
    application = apply(client, post["id"]).json()

    response = client.get(f"{applications_url(post['id'])}/{application['id']}/cv")

    assert response.status_code == 404
    assert response.json()["detail"] == "No CV attached"


def test_new_cv_replaces_old_one(client, upload_dir) -> None:
    sign_up(client, "replace@example.com")
    post = create_job_post(client)
    application = apply(client, post["id"], cv=("old.txt", b"old cv", "text/plain")).json()
    url = f"{applications_url(post['id'])}/{application['id']}"

    response = client.patch(url, files={"cv": ("new.txt", b"new cv", "text/plain")})

    assert response.status_code == 200
    assert response.json()["cv_filename"] == "new.txt"
    assert response.json()["body"] == application["body"]
    assert [path.read_bytes() for path in stored_files(upload_dir)] == [b"new cv"]
    assert client.get(f"{url}/cv").content == b"new cv"


def test_withdraw_application_purges_cv(client, upload_dir) -> None:
    sign_up(client, "withdraw@example.com")
    post = create_job_post(client)
    application = apply(client, post["id"], cv=("cv.pdf", PDF, "application/pdf")).json()
    url = f"{applications_url(post['id'])}/{application['id']}"

    response = client.delete(url)

    assert response.status_code == 204
    assert client.get(url).status_code == 404
    assert stored_files(upload_dir) == []


def test_deleting_post_removes_its_applications(client, upload_dir) -> None:
    user = sign_up(client, "cascade@example.com")
    doomed = create_job_post(client, title="Doomed")
    kept = create_job_post(client, title="Kept")
    gone = apply(client, doomed["id"], cv=("cv.pdf", PDF, "application/pdf")).json()
    survivor = apply(client, kept["id"], user_id=user["id"]).json()

    assert client.delete(f"/job_posts/{doomed['id']}").status_code == 204

    assert client.get(applications_url(doomed["id"])).status_code == 404
    assert client.get(f"{applications_url(doomed['id'])}/{gone['id']}").status_code == 404
    assert client.get(f"{applications_url(kept['id'])}/{survivor['id']}").status_code == 200
    assert stored_files(upload_dir) == []


def test_emptied_body_is_rejected_on_update(client) -> None:
    sign_up(client, "emptied@example.com")
    post = create_job_post(client)
    application = apply(client, post["id"], body="Before").json()
    url = f"{applications_url(post['id'])}/{application['id']}"

    response = client.patch(url, data={"body": ""})

    assert response.status_code == 422
    form = response.json()["form"]
    assert form["errors"] == {"body": ["can't be blank"]}
    assert form["values"]["body"] == ""
    assert client.get(url).json()["body"] == "Before"


def test_out_of_range_ids_are_not_found(client) -> None:
    user = sign_up(client, "range@example.com")
    post = create_job_post(client)
    huge = 2 ** 64

    assert client.get(applications_url(huge)).status_code == 404
    assert apply(client, huge, user_id=user["id"]).status_code == 404
    assert client.get(f"{applications_url(post['id'])}/{huge}").status_code == 404
    assert client.get(f"{applications_url(post['id'])}/-1").status_code == 404


def test_out_of_range_user_id_must_exist(client) -> None:
    post = create_job_post(client)
    client.cookies.clear()

    response = apply(client, post["id"], user_id=2 ** 64)

    assert response.status_code == 422
    assert response.json()["form"]["errors"] == {"user": ["must exist"]}
    assert client.get(applications_url(post["id"])).json() == []
