"""Shared dependencies for routers."""

from typing import Annotated

from fastapi import Depends

from src.clients.storage import get_store
from src.import_.dynamic.importer import DynamicCSVImporter
from src.import_.dynamic.models import RecordType
from src.import_.reports.importer import ProviderReportImporter
from src.services.record_repository import (
    PATIENTS_COLLECTION,
    PROVIDERS_COLLECTION,
    RecordRepository,
)
from src.services.record_service import RecordService
from src.services.storage_service import KeyValueStore

# Typed dependency aliases for use in endpoint signatures
StoreDep = Annotated[KeyValueStore, Depends(get_store)]


def get_patient_repository(store: StoreDep) -> RecordRepository:
    return RecordRepository(store, PATIENTS_COLLECTION)


def get_provider_repository(store: StoreDep) -> RecordRepository:
    return RecordRepository(store, PROVIDERS_COLLECTION)


def get_patient_service(store: StoreDep) -> RecordService:
    return RecordService(RecordRepository(store, PATIENTS_COLLECTION), RecordType.PATIENTS)


def get_provider_service(store: StoreDep) -> RecordService:
    return RecordService(RecordRepository(store, PROVIDERS_COLLECTION), RecordType.PROVIDERS)


def get_dynamic_importer(store: StoreDep) -> DynamicCSVImporter:
    return DynamicCSVImporter(store)


def get_provider_report_importer(store: StoreDep) -> ProviderReportImporter:
    return ProviderReportImporter(store)


PatientRepositoryDep = Annotated[RecordRepository, Depends(get_patient_repository)]
ProviderRepositoryDep = Annotated[RecordRepository, Depends(get_provider_repository)]
PatientServiceDep = Annotated[RecordService, Depends(get_patient_service)]
ProviderServiceDep = Annotated[RecordService, Depends(get_provider_service)]
DynamicImporterDep = Annotated[DynamicCSVImporter, Depends(get_dynamic_importer)]
ProviderReportImporterDep = Annotated[
    ProviderReportImporter, Depends(get_provider_report_importer)
]
