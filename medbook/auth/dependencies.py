import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from medbook.auth import jwt_handler
from medbook.database import get_db
from medbook.models.user import User
from medbook.scheduling.entities import ROLE_DOCTOR, USER_ROLES, Requester

security = HTTPBearer()


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    token = credentials.credentials
    try:
        payload = jwt_handler.decode_access_token(token)
    except jwt.PyJWTError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from exc

    email = payload.get("sub")
    if not email:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token subject")

    try:
        user = db.query(User).filter(User.email == email).first()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database unavailable. Verify DATABASE_URL and database credentials.",
        ) from exc
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    if user.role not in USER_ROLES:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Unknown user role")
    return user


def get_requester(current_user: User = Depends(get_current_user)) -> Requester:
    return Requester(id=current_user.id, role=current_user.role)


def require_doctor(requester: Requester = Depends(get_requester)) -> Requester:
    if requester.role != ROLE_DOCTOR:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"User role {requester.role} is not authorized to access this route",
        )
    return requester
