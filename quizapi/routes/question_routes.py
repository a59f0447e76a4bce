from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from quizapi import repository, scoring
from quizapi.pipeline import BasicRoute, get_db
from quizapi.routes.user_routes import UserResponse

router = APIRouter(tags=['questions'], route_class=BasicRoute)


class QuestionResponse(BaseModel):
    # The correct option index stays server-side.
    id: int
    text: str
    options: list[str]

    class Config:
        from_attributes = True


class SubmitAnswerRequest(BaseModel):
    user_id: str = Field(alias='userId')
    answer: int

    class Config:
        populate_by_name = True


@router.get('', response_model=list[QuestionResponse])
def list_questions(db: Session = Depends(get_db)):
    return list(repository.list_questions(db))


@router.post('/{question_id}', response_model=UserResponse)
def submit_answer(question_id: int, data: SubmitAnswerRequest, db: Session = Depends(get_db)):
    return scoring.submit_answer(db, question_id, data.user_id, data.answer)
