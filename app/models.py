from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional, Union

from plutusscan.schema import ParameterClass


class ParameterEncodeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    value: str
    classification: ParameterClass = ParameterClass.OPAQUE_BINARY
    type_schema: Optional[Dict[str, Any]] = Field(default=None, alias="schema")
    passthrough: bool = False


class MetadataEncodeRequest(BaseModel):
    source_url: str
    commit_hash: str
    compiler_version: str
    source_path: Optional[str] = None
    compiler_type: str = "AIKEN"
    parameters: Dict[str, List[str]] = Field(default_factory=dict)
    chunk_size: Optional[int] = Field(default=None, gt=0)


class BlueprintRequest(BaseModel):
    blueprint: Dict[str, Any]
    compiler_version: Optional[str] = None


class ParameterInputModel(BaseModel):
    value: str = ""
    passthrough: bool = False
    reference_to: Optional[str] = None
    name: str = ""


class ResolveRequest(BaseModel):
    blueprint: Dict[str, Any]
    compiler_version: Optional[str] = None
    inputs: Dict[str, List[ParameterInputModel]] = Field(default_factory=dict)
    max_passes: Optional[int] = Field(default=None, ge=1, le=100)
    expected_hashes: Optional[Union[str, List[str]]] = None


class CompareRequest(BaseModel):
    actual: Union[str, List[str]]
    expected: Union[str, List[str]]
