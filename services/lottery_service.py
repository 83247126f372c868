from typing import List

from infrastructure.http.booking_api_client import BookingApiClient
from use_cases.domain_models import LotteryEntry, LotteryGrade


def list_my_entries(client: BookingApiClient) -> List[LotteryEntry]:
    data = client.get("/lottery/entries") or []
    if isinstance(data, dict):
        data = data.get("content") or []
    return [LotteryEntry.from_api(item) for item in data]


def list_grades(client: BookingApiClient, performance_id: int) -> List[LotteryGrade]:
    """Grade catalogue, one entry per (section, grade).

    The backend groups grades under sections:
    `[{sectionName, grades: [{grade, rows}]}]`.
    """
    data = client.get(f"/performances/{performance_id}/lottery/sections") or []
    grades = []
    for section in data:
        section_name = section.get("sectionName") or ""
        for item in section.get("grades") or []:
            grade = (item.get("grade") or "").strip()
            if not grade:
                continue
            grades.append(LotteryGrade(section_name=section_name, grade=grade, rows=tuple(item.get("rows") or ())))
    return grades


def create_entry(client: BookingApiClient, performance_id: int, schedule_id: int, grade: str, quantity: int) -> LotteryEntry:
    data = client.post(
        f"/performances/{performance_id}/lottery-entries",
        json={"scheduleId": schedule_id, "grade": grade, "quantity": quantity},
    )
    payload = dict(data) if isinstance(data, dict) else {}
    payload.setdefault("status", "APPLIED")
    payload.setdefault("scheduleId", schedule_id)
    payload.setdefault("grade", grade)
    payload.setdefault("quantity", quantity)
    return LotteryEntry.from_api(payload)
