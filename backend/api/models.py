"""
Pydantic request/response models for the API.
"""
from pydantic import BaseModel, Field
from typing import Dict, List, Optional


# ============== Records ==============

class SystemRecordModel(BaseModel):
    id: str
    description: Optional[str] = None
    supplier: Optional[str] = None
    unit: Optional[str] = None
    type: Optional[str] = None
    state: Optional[str] = None
    location: Optional[str] = None
    tag: Optional[str] = None


class RegistryRecordModel(BaseModel):
    tag: str
    description: Optional[str] = None
    species: Optional[str] = None
    supplier: Optional[str] = None
    unit: Optional[str] = None
    status: Optional[str] = None


class PastedRecordModel(BaseModel):
    description: Optional[str] = None
    location: Optional[str] = None
    state: Optional[str] = None
    tag: Optional[str] = None


# ============== Requests ==============

class SimilarityRequest(BaseModel):
    a: Optional[str] = None
    b: Optional[str] = None


class RankRequest(BaseModel):
    item: SystemRecordModel
    pool: List[RegistryRecordModel] = []
    limit: Optional[int] = Field(None, ge=1)


class MatchBatchRequest(BaseModel):
    """Either structured rows or raw pasted text (header row required)."""
    pasted: Optional[List[PastedRecordModel]] = None
    pasted_text: Optional[str] = None
    pool: List[SystemRecordModel] = []


class PreviewRequest(BaseModel):
    pasted_text: str
    target_unit: str
    pool: List[SystemRecordModel] = []
    registry: List[RegistryRecordModel] = []
    inventory: Optional[List[SystemRecordModel]] = None
    unit_mapping: Optional[Dict[str, List[str]]] = None


class ConfirmMatchRequest(BaseModel):
    system: SystemRecordModel
    registry: RegistryRecordModel
    user: Optional[str] = None
