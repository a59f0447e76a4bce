from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, field_validator
from sqlalchemy.orm import Session

from quizapi import repository
from quizapi.core.identity import derive_user_id
from quizapi.pipeline import BasicRoute, get_db

router = APIRouter(tags=['users'], route_class=BasicRoute)


class CreateUserRequest(BaseModel):
    email: str
    name: str | None = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str | None) -> str | None:
        if value is None:
            return None

        normalized = value.strip()
        return normalized or None


class UserResponse(BaseModel):
    id: str
    email: str
    name: str | None = None
    score: int

    class Config:
        from_attributes = True


class ScoreResponse(BaseModel):
    id: str
    score: int

    class Config:
        from_attributes = True


@router.get('', response_model=list[UserResponse])
def list_users(db: Session = Depends(get_db)):
    return list(repository.list_users(db))


@router.post('', response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(data: CreateUserRequest, db: Session = Depends(get_db)):
    user_id = derive_user_id(data.email)
    return repository.create_user(db, user_id, data.email.strip(), data.name)


@router.get('/{user_id}', response_model=UserResponse)
def get_user(user_id: str, db: Session = Depends(get_db)):
    return repository.get_user(db, user_id)


@router.get('/{user_id}/score', response_model=ScoreResponse)
def get_score(user_id: str, db: Session = Depends(get_db)):
    return repository.get_user(db, user_id)
