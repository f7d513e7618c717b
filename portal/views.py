"""Page view models and the template renderer.

Route handlers build one of these models and pass it to ``render``; the
templates only ever see the model's fields.
"""
from pathlib import Path

from fastapi import Request
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel, ConfigDict

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))

ERROR_MESSAGES = {
    "missing_fields": "Please fill in all fields.",
    "email_taken": "This email is already registered.",
    "server_error": "Something went wrong. Please try again.",
    "invalid_credentials": "Invalid email or password.",
    "missing_title": "A title is required.",
}


def error_message(code: str | None) -> str | None:
    if not code:
        return None
    return ERROR_MESSAGES.get(code, ERROR_MESSAGES["server_error"])


class AuthFormView(BaseModel):
    error: str | None = None
    notice: str | None = None


class CourseCard(BaseModel):
    id: int
    title: str

    model_config = ConfigDict(from_attributes=True)


class DashboardView(BaseModel):
    user_name: str
    my_courses: list[CourseCard]
    available_courses: list[CourseCard]
    my_count: int
    available_count: int


class LessonItem(BaseModel):
    id: int
    title: str
    content: str
    order_num: int

    model_config = ConfigDict(from_attributes=True)


class CoursePageView(BaseModel):
    course_id: int
    title: str
    description: str
    link: str
    lessons: list[LessonItem]
    is_admin: bool
    is_enrolled: bool
    error: str | None = None


class AdminCourseRow(BaseModel):
    id: int
    title: str
    description: str
    link: str
    enrolled_count: int


class AdminPanelView(BaseModel):
    courses: list[AdminCourseRow]
    error: str | None = None


def render(request: Request, view_name: str, model: BaseModel, status_code: int = 200):
    return templates.TemplateResponse(
        request,
        f"{view_name}.html",
        model.model_dump(),
        status_code=status_code,
    )
