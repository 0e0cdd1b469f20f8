import csv
import io

import pytest
from httpx import AsyncClient

from app.services.hour_aggregator import ActivityCategory


@pytest.mark.asyncio
async def test_add_student(client: AsyncClient, coordinator_headers, student_list):
    response = await client.post(
        f"/api/lists/{student_list.id}/students",
        headers=coordinator_headers,
        json={"name": "  Maria Santos ", "cpf": "234.567.890-11", "course": "Engenharia Mecânica", "class_name": "2024.1"},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Maria Santos"
    assert data["list_id"] == student_list.id


@pytest.mark.asyncio
async def test_add_student_to_missing_list(client: AsyncClient, coordinator_headers):
    response = await client.post(
        "/api/lists/999/students",
        headers=coordinator_headers,
        json={"name": "Maria Santos", "cpf": "234.567.890-11"},
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_duplicate_cpf_in_same_list(client: AsyncClient, coordinator_headers, student_list, student):
    response = await client.post(
        f"/api/lists/{student_list.id}/students",
        headers=coordinator_headers,
        json={"name": "Outra Pessoa", "cpf": student.cpf},
    )

    assert response.status_code == 409
    assert student.cpf in response.json()["detail"]


@pytest.mark.asyncio
async def test_same_cpf_in_another_list(client: AsyncClient, coordinator_headers, student):
    other = await client.post("/api/lists", headers=coordinator_headers, json={"title": "Outra Turma"})

    response = await client.post(
        f"/api/lists/{other.json()['id']}/students",
        headers=coordinator_headers,
        json={"name": "Mesma Pessoa", "cpf": student.cpf},
    )
    assert response.status_code == 201


@pytest.mark.asyncio
async def test_monitor_cannot_add_student(client: AsyncClient, monitor_headers, student_list):
    response = await client.post(
        f"/api/lists/{student_list.id}/students",
        headers=monitor_headers,
        json={"name": "Maria Santos", "cpf": "234.567.890-11"},
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_list_students_with_computed_hours(
    client: AsyncClient, monitor_headers, student_list, student, add_activity
):
    await add_activity(student, ActivityCategory.EVENTS, 70)
    await add_activity(student, ActivityCategory.RESEARCH, 20)

    response = await client.get(f"/api/lists/{student_list.id}/students", headers=monitor_headers)

    assert response.status_code == 200
    [row] = response.json()
    assert row["id"] == student.id
    assert row["valid_total_hours"] == 70
    assert row["status"] == "in progress"


@pytest.mark.asyncio
async def test_list_students_filters(
    client: AsyncClient, db_session, monitor_headers, student_list, student, add_activity
):
    from app.models.student import Student

    done = Student(list_id=student_list.id, name="Zeca Concluído", cpf="999", course="", class_name="")
    db_session.add(done)
    await db_session.commit()
    for category in (ActivityCategory.EVENTS, ActivityCategory.RESEARCH, ActivityCategory.COURSES):
        await add_activity(done, category, 50)

    url = f"/api/lists/{student_list.id}/students"

    response = await client.get(url, headers=monitor_headers, params={"status": "complete"})
    assert [row["cpf"] for row in response.json()] == ["999"]

    response = await client.get(url, headers=monitor_headers, params={"status": "in progress"})
    assert [row["id"] for row in response.json()] == [student.id]

    response = await client.get(url, headers=monitor_headers, params={"q": "zeca"})
    assert [row["cpf"] for row in response.json()] == ["999"]

    response = await client.get(url, headers=monitor_headers, params={"q": "123.456"})
    assert [row["id"] for row in response.json()] == [student.id]


@pytest.mark.asyncio
async def test_update_student(client: AsyncClient, coordinator_headers, student):
    response = await client.patch(
        f"/api/students/{student.id}",
        headers=coordinator_headers,
        json={"course": "Engenharia Elétrica"},
    )

    assert response.status_code == 200
    assert response.json()["course"] == "Engenharia Elétrica"
    assert response.json()["cpf"] == student.cpf


@pytest.mark.asyncio
async def test_delete_student_removes_activities(
    client: AsyncClient, coordinator_headers, student, add_activity
):
    activity = await add_activity(student, ActivityCategory.EVENTS, 10)

    response = await client.delete(f"/api/students/{student.id}", headers=coordinator_headers)
    assert response.status_code == 200

    response = await client.get(f"/api/activities/{activity.id}", headers=coordinator_headers)
    assert response.status_code == 404


def _upload(content: str, filename: str = "alunos.csv"):
    return {"file": (filename, content.encode("utf-8"), "text/csv")}


@pytest.mark.asyncio
async def test_import_csv(client: AsyncClient, coordinator_headers, student_list, student):
    content = (
        "Nome,CPF,Curso,Turma\n"
        "João da Silva,111.111.111-11,Engenharia Civil,2024.1\n"
        ",222.222.222-22,Engenharia Civil,2024.1\n"
        f"Cópia,{student.cpf},Engenharia Civil,2024.1\n"
        "João Repetido,111.111.111-11,Engenharia Civil,2024.1\n"
    )

    response = await client.post(
        f"/api/lists/{student_list.id}/students/import",
        headers=coordinator_headers,
        files=_upload(content),
    )

    assert response.status_code == 200
    assert response.json() == {
        "total_rows": 4,
        "inserted": 1,
        "skipped_duplicates": 2,
        "invalid_rows": 1,
        "errors": ["Row 3: name and CPF are required"],
    }

    listing = await client.get(f"/api/lists/{student_list.id}/students", headers=coordinator_headers)
    assert {row["cpf"] for row in listing.json()} == {student.cpf, "111.111.111-11"}


@pytest.mark.asyncio
async def test_import_csv_english_headers_with_bom(client: AsyncClient, coordinator_headers, student_list):
    content = "\ufeffname,cpf,course,class\nAna,333,Direito,2023.2\n"

    response = await client.post(
        f"/api/lists/{student_list.id}/students/import",
        headers=coordinator_headers,
        files=_upload(content),
    )

    assert response.status_code == 200
    assert response.json()["inserted"] == 1


@pytest.mark.asyncio
async def test_import_csv_duplicates_as_errors(client: AsyncClient, coordinator_headers, student_list, student):
    content = f"Nome,CPF,Curso,Turma\nCópia,{student.cpf},Eng,2024.1\n"

    response = await client.post(
        f"/api/lists/{student_list.id}/students/import",
        headers=coordinator_headers,
        params={"skip_duplicates": "false"},
        files=_upload(content),
    )

    data = response.json()
    assert data["skipped_duplicates"] == 0
    assert data["invalid_rows"] == 1
    assert student.cpf in data["errors"][0]


@pytest.mark.asyncio
async def test_import_csv_missing_columns(client: AsyncClient, coordinator_headers, student_list):
    response = await client.post(
        f"/api/lists/{student_list.id}/students/import",
        headers=coordinator_headers,
        files=_upload("Nome,CPF\nAna,333\n"),
    )

    data = response.json()
    assert data["inserted"] == 0
    assert data["errors"] == ["CSV must contain the columns: Nome, CPF, Curso, Turma"]


@pytest.mark.asyncio
async def test_import_rejects_non_csv(client: AsyncClient, coordinator_headers, student_list):
    response = await client.post(
        f"/api/lists/{student_list.id}/students/import",
        headers=coordinator_headers,
        files=_upload("whatever", filename="alunos.xlsx"),
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_import_template(client: AsyncClient, monitor_headers):
    response = await client.get("/api/students/import-template", headers=monitor_headers)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert response.content.startswith("\ufeff".encode("utf-8"))

    rows = list(csv.reader(io.StringIO(response.content.decode("utf-8-sig"))))
    assert rows[0] == ["Nome", "CPF", "Curso", "Turma"]
    assert len(rows) == 4
