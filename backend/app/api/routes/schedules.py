from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.schemas.timetable import TimetableEntryOut, WeeklyTimetableOut
from app.services import timetable
from app.services.timetable import WeeklyTimetable

router = APIRouter()


def _week_out(week: WeeklyTimetable) -> WeeklyTimetableOut:
    return WeeklyTimetableOut(
        owner_type=week.owner_type,
        owner_id=week.owner_id,
        week_start=week.week_start,
        week_end=week.week_end,
        entries=[TimetableEntryOut.model_validate(item) for item in week.entries],
    )


@router.get("/students/{student_id}", response_model=WeeklyTimetableOut)
def student_schedule(student_id: str, week_start: date | None = None, db: Session = Depends(get_db)) -> WeeklyTimetableOut:
    return _week_out(timetable.student_week(db, student_id, week_start))


@router.get("/teachers/{teacher_id}", response_model=WeeklyTimetableOut)
def teacher_schedule(teacher_id: str, week_start: date | None = None, db: Session = Depends(get_db)) -> WeeklyTimetableOut:
    return _week_out(timetable.teacher_week(db, teacher_id, week_start))


@router.get("/rooms/{room_id}", response_model=WeeklyTimetableOut)
def room_schedule(room_id: str, week_start: date | None = None, db: Session = Depends(get_db)) -> WeeklyTimetableOut:
    return _week_out(timetable.room_week(db, room_id, week_start))
