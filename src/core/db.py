from sqlmodel import Session, SQLModel, create_engine

from core.config import settings
from models import ExchangeRateHistory, VaultStateRecord

engine = create_engine(str(settings.SQLALCHEMY_DATABASE_URI))


# make sure all SQLModel models are imported (models) before initializing DB
# otherwise, SQLModel might fail to initialize relationships properly
# for more details: https://github.com/tiangolo/full-stack-fastapi-postgresql/issues/28


def init_db(bind=engine) -> None:
    SQLModel.metadata.create_all(
        bind, tables=[VaultStateRecord.__table__, ExchangeRateHistory.__table__]
    )
