import base64
import io

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool


@pytest.fixture
def session_factory():
    from laudovet.models import Base

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _fk_on(dbapi_conn, connection_record):
        dbapi_conn.execute("PRAGMA foreign_keys=ON")

    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine, expire_on_commit=False)
    engine.dispose()


@pytest.fixture
def config_store(session_factory):
    from laudovet.config_store import ConfigStore
    store = ConfigStore(session_factory)
    store.seed_defaults()
    return store


@pytest.fixture
def store(session_factory, config_store):
    from laudovet.storage import RecordStore
    s = RecordStore(session_factory)
    s.seed_default_templates()
    return s


@pytest.fixture
def png_data_url():
    """Factory for a solid-colour PNG as a data URL."""
    from PIL import Image

    def make(width=400, height=200):
        buf = io.BytesIO()
        Image.new("RGB", (width, height), (200, 30, 30)).save(buf, format="PNG")
        return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")

    return make


@pytest.fixture
def rex(store):
    """Rex the Labrador with one abdominal exam."""
    import datetime

    from laudovet.records import Patient

    patient = store.create_patient(Patient(
        name="Rex",
        species="dog",
        breed="Labrador",
        sex="male",
        birth_date=datetime.date(2020, 3, 10),
        weight=30.0,
        owner_name="Ana Souza",
    ))
    exam = store.create_exam(
        patient.id,
        "ultrasound_abd",
        exam_date=datetime.datetime(2024, 5, 2, 14, 30),
        exam_weight=31.5,
    )
    return patient, exam
