"""
PlutusScan Dependency Resolution

Computes each validator's final (parameterized) hash when parameters may
reference other validators' hashes.

Resolution runs in passes rather than over a sorted dependency graph:
- Every validator starts at its unparameterized hash
- Each pass reads a snapshot of the state taken at the start of the pass,
  encodes every configured validator's parameters (references take the
  target's current hash), and asks the parameterization primitive for a
  new hash
- All new hashes of a pass are committed together at its end
- The run stops after a pass that changes nothing, or when the pass budget
  is spent (reported as non-convergence, never raised)

A cycle simply never converges. A validator that fails to encode keeps its
previous hash and is reported as a warning; other validators are not
affected.
"""

import importlib
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from .blueprint import PlutusVersion, Validator, ValidatorId, index_validators
from .errors import EncodingError, ErrorKind
from .hashing import SCRIPT_HASH_HEX_LENGTH, is_script_hash, strip_hex
from .parameters import encode_for_schema, encode_script_hash_reference

logger = logging.getLogger(__name__)

MAX_RESOLUTION_PASSES = 10

# (compiled_code, encoded parameters, plutus version) -> parameterized script hash
Parameterizer = Callable[[str, List[str], PlutusVersion], str]


@dataclass
class ParameterInput:
    """
    User input for one parameter slot.

    Either a literal `value` (encoded by schema, or taken as CBOR hex when
    `passthrough` is set) or a reference to another validator whose current
    hash is used instead.
    """
    value: str = ""
    passthrough: bool = False
    reference_to: Optional[ValidatorId] = None
    name: str = ""

    def __post_init__(self):
        if self.reference_to is not None:
            self.reference_to = ValidatorId.parse(self.reference_to)

    @property
    def is_reference(self) -> bool:
        return self.reference_to is not None

    @property
    def is_configured(self) -> bool:
        return self.is_reference or bool(self.value and self.value.strip())

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ParameterInput':
        return cls(
            value=str(data.get("value") or ""),
            passthrough=bool(data.get("passthrough", False)),
            reference_to=data.get("reference_to") or None,
            name=data.get("name", ""),
        )


@dataclass(frozen=True)
class ResolutionWarning:
    """A soft failure for one validator, optionally pinned to a slot."""
    validator: Optional[ValidatorId]
    kind: ErrorKind
    message: str
    slot: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        d = {
            "validator": str(self.validator) if self.validator else None,
            "kind": self.kind.value,
            "message": self.message,
        }
        if self.slot is not None:
            d["slot"] = self.slot
        return d


class ResolutionState:
    """
    Best-known hash per validator for one resolution run.

    Created fresh by every call to resolve(); never shared between runs.
    """

    def __init__(self, validators: Iterable[Validator]):
        self._hashes: Dict[ValidatorId, str] = {
            v.id: (v.unparameterized_hash or "").lower() for v in validators
        }

    def get(self, validator_id: ValidatorId) -> Optional[str]:
        return self._hashes.get(validator_id) or None

    def snapshot(self) -> Dict[ValidatorId, str]:
        return dict(self._hashes)

    def commit(self, updates: Mapping[ValidatorId, str]) -> None:
        self._hashes.update(updates)

    def __contains__(self, validator_id) -> bool:
        return validator_id in self._hashes

    def __len__(self) -> int:
        return len(self._hashes)

    def to_dict(self) -> Dict[str, str]:
        return {str(k): v for k, v in self._hashes.items()}


@dataclass
class ResolutionResult:
    """Outcome of a resolution run; partial results stay inspectable."""
    state: ResolutionState
    converged: bool
    passes_used: int
    warnings: List[ResolutionWarning] = field(default_factory=list)
    encoded_parameters: Dict[ValidatorId, List[str]] = field(default_factory=dict)

    @property
    def budget_exhausted(self) -> bool:
        return not self.converged

    def final_hash(self, validator_id: Union[str, ValidatorId]) -> Optional[str]:
        return self.state.get(ValidatorId.parse(validator_id))

    def warnings_for(self, validator_id: Union[str, ValidatorId]) -> List[ResolutionWarning]:
        vid = ValidatorId.parse(validator_id)
        return [w for w in self.warnings if w.validator == vid]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "converged": self.converged,
            "passes_used": self.passes_used,
            "hashes": self.state.to_dict(),
            "encoded_parameters": {str(k): list(v) for k, v in self.encoded_parameters.items()},
            "warnings": [w.to_dict() for w in self.warnings],
        }


# ============================================================
# Resolution
# ============================================================

def _encode_slots(
    validator: Validator,
    slots: List[ParameterInput],
    snapshot: Dict[ValidatorId, str],
) -> Tuple[Optional[List[str]], List[ResolutionWarning]]:
    """Encode every slot of one validator; None when any slot is not ready."""
    encoded: List[str] = []
    warnings: List[ResolutionWarning] = []
    slot_count = max(len(validator.parameters), len(slots))

    for index in range(slot_count):
        slot = slots[index] if index < len(slots) else ParameterInput()
        schema = validator.parameters[index] if index < len(validator.parameters) else None

        if slot.is_reference:
            target_hash = snapshot.get(slot.reference_to)
            if not target_hash:
                warnings.append(ResolutionWarning(
                    validator.id, ErrorKind.UNRESOLVED_REFERENCE,
                    f"reference never resolved: {slot.reference_to}", index,
                ))
                continue
            try:
                encoded.append(encode_script_hash_reference(target_hash))
            except EncodingError as e:
                warnings.append(ResolutionWarning(validator.id, e.kind, e.message, index))
            continue

        try:
            encoded.append(encode_for_schema(slot.value, schema, slot.passthrough))
        except EncodingError as e:
            warnings.append(ResolutionWarning(validator.id, e.kind, e.message, index))

    if warnings:
        return None, warnings
    return encoded, warnings


def _normalize_inputs(
    inputs: Mapping[Union[str, ValidatorId], List[ParameterInput]],
    known: Dict[ValidatorId, Validator],
) -> Dict[ValidatorId, List[ParameterInput]]:
    normalized = {}
    for key, slots in inputs.items():
        vid = ValidatorId.parse(key)
        if vid not in known:
            logger.warning("Ignoring parameters for unknown validator %s", vid)
            continue
        normalized[vid] = [s if isinstance(s, ParameterInput) else ParameterInput.from_dict(s) for s in slots]
    return normalized


def resolve(
    validators: List[Validator],
    inputs: Mapping[Union[str, ValidatorId], List[ParameterInput]],
    parameterizer: Parameterizer,
    max_passes: int = MAX_RESOLUTION_PASSES,
) -> ResolutionResult:
    """
    Resolve final hashes for all validators.

    Args:
        validators: Validators from the build
        inputs: Parameter slots per validator (positional, same order as
            the validator's declared parameters)
        parameterizer: External primitive applying encoded parameters to
            compiled code and returning the new script hash
        max_passes: Pass budget

    Returns:
        ResolutionResult; warnings describe the final pass only

    Raises:
        BlueprintError: two validators share an identity
        ValueError: max_passes below 1, or a malformed validator id in inputs
    """
    if max_passes < 1:
        raise ValueError(f"max_passes must be at least 1, got {max_passes}")

    known = index_validators(validators)
    slots_by_id = _normalize_inputs(inputs, known)
    pending = [
        known[vid] for vid in known
        if any(s.is_configured for s in slots_by_id.get(vid, []))
    ]

    state = ResolutionState(validators)
    passes_used = 0
    converged = False
    warnings: List[ResolutionWarning] = []
    encoded_parameters: Dict[ValidatorId, List[str]] = {}

    while passes_used < max_passes:
        passes_used += 1
        snapshot = state.snapshot()
        updates: Dict[ValidatorId, str] = {}
        warnings = []
        encoded_parameters = {}

        for validator in pending:
            encoded, slot_warnings = _encode_slots(validator, slots_by_id[validator.id], snapshot)
            warnings.extend(slot_warnings)
            if encoded is None:
                continue

            try:
                new_hash = parameterizer(validator.compiled_code, list(encoded), validator.plutus_version)
            except Exception as e:
                logger.warning("Parameterization failed for %s: %s", validator.id, e)
                warnings.append(ResolutionWarning(
                    validator.id, ErrorKind.PARAMETERIZATION_FAILED, str(e) or type(e).__name__,
                ))
                continue

            new_hash = strip_hex(new_hash) if isinstance(new_hash, str) else ""
            if not is_script_hash(new_hash):
                warnings.append(ResolutionWarning(
                    validator.id, ErrorKind.INVALID_HASH_LENGTH,
                    f"parameterized hash is not {SCRIPT_HASH_HEX_LENGTH} hex characters: {new_hash!r}",
                ))
                continue

            encoded_parameters[validator.id] = encoded
            if new_hash != snapshot.get(validator.id):
                updates[validator.id] = new_hash

        state.commit(updates)
        logger.debug("Resolution pass %d: %d validators changed", passes_used, len(updates))

        if not updates:
            converged = True
            break

    if not converged:
        warnings.append(ResolutionWarning(
            None, ErrorKind.RESOLUTION_BUDGET_EXHAUSTED,
            f"hashes still changing after {max_passes} passes; check for circular references",
        ))
        logger.warning("Resolution did not converge after %d passes", max_passes)

    for w in warnings:
        if w.kind != ErrorKind.RESOLUTION_BUDGET_EXHAUSTED:
            logger.warning("%s [%s] %s", w.validator, w.kind.value, w.message)

    logger.info("Resolved %d validators in %d passes (converged=%s)", len(pending), passes_used, converged)
    return ResolutionResult(
        state=state,
        converged=converged,
        passes_used=passes_used,
        warnings=warnings,
        encoded_parameters=encoded_parameters,
    )


def load_parameterizer(target: str) -> Parameterizer:
    """
    Import the parameterization primitive from "package.module:function".

    Raises:
        ValueError: malformed target, missing attribute, or not callable
    """
    module_name, sep, attr = (target or "").partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(f"Invalid parameterizer '{target}': expected package.module:function")

    module = importlib.import_module(module_name)
    func = getattr(module, attr, None)
    if func is None or not callable(func):
        raise ValueError(f"Parameterizer '{target}' is not a callable")
    return func
