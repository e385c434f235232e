# ======================================
# 📁 lambdaroute/interfaces/types/deployment.py
# ======================================
from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator

# A revision set maps an opaque label to a version identifier.
RevisionSet = Dict[str, str]

WEIGHT_TOLERANCE = 1e-6


class FunctionIdentity(BaseModel):
    model_config = ConfigDict(frozen=True)

    function_name: str = Field(..., min_length=1)
    account: str
    region: str
    app_name: Optional[str] = Field(None, description="Pipeline application; prefixes the function name on lookup.")


class ArtifactReference(BaseModel):
    """Pipeline artifact pointer, serialized with clouddriver's field names."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    reference: str
    id: Optional[str] = None
    artifact_account: Optional[str] = Field(None, alias="artifactAccount")
    type: Optional[str] = None
    name: Optional[str] = None
    version: Optional[str] = None


class DeploymentRequest(BaseModel):
    """
    Everything one blue/green run needs. Built once per run by the caller
    (stage adapter, CLI) and never mutated.
    """
    model_config = ConfigDict(frozen=True)

    function: FunctionIdentity
    alias_name: str = Field(..., min_length=1)
    major_version: str
    major_weight: float = Field(..., ge=0.0, le=1.0)
    minor_version: str
    minor_weight: float = Field(..., ge=0.0, le=1.0)
    output_artifact: ArtifactReference
    payload_artifact: ArtifactReference
    timeout_seconds: float = Field(..., gt=0)
    latest_version_qualifier: Optional[str] = Field(
        None, description="Resolved version to promote. Defaults to minor_version."
    )

    @model_validator(mode="after")
    def _weights_sum_to_one(self) -> "DeploymentRequest":
        total = self.major_weight + self.minor_weight
        if abs(total - 1.0) > WEIGHT_TOLERANCE:
            raise ValueError(f"major_weight + minor_weight must equal 1.0, got {total}")
        return self

    @property
    def promotion_target(self) -> str:
        return self.latest_version_qualifier or self.minor_version


class InvocationRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    function: FunctionIdentity
    qualifier: str
    payload_artifact: ArtifactReference


class PromotionRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    function: FunctionIdentity
    alias_name: str
    major_version: str
    major_weight: float = 1.0
    minor_version: Optional[str] = None
    minor_weight: float = 0.0


class DeploymentOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    succeeded: bool
    promoted_version: Optional[str] = None
    error_message: Optional[str] = None
    side_effects: Dict[str, Any] = Field(default_factory=dict)
    operation_url: Optional[str] = Field(None, description="Task URL of the promotion operation, when the backend returns one.")

    @classmethod
    def failed(cls, error_message: str) -> "DeploymentOutcome":
        return cls(succeeded=False, error_message=error_message)
