"""Certification path building from an end-entity certificate to a trust anchor."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, Optional, Sequence, TypeVar

from pkipath.certificate import Cert, SignedData, TrustAnchor
from pkipath.checks import Budget, Role, check_issuer_independent_properties
from pkipath.der import Reader, read_all
from pkipath.eku import KeyUsage
from pkipath.errors import ErrorKind, PkiError

T = TypeVar("T")

MAX_SUB_CA_COUNT = 6

SignatureVerifier = Callable[[bytes, SignedData], None]
"""Checks ``signed_data`` against a DER SubjectPublicKeyInfo, raising PkiError."""

RevocationChecker = Callable[
    ["PathNode", bytes, bytes, Optional[bytes], Budget, int], None
]
"""Called as (node, issuer_subject, issuer_spki, issuer_key_usage, budget, time)."""

NameConstraintsChecker = Callable[[Reader, "PathNode", Budget], None]
"""Checks the certificates from ``node`` down against encoded name constraints."""

PathVerifier = Callable[["VerifiedPath"], None]
"""Inspects a candidate path and raises PkiError to reject it."""


class _Fatal(Exception):
    """Carries an error that halts path building altogether."""

    def __init__(self, error: PkiError) -> None:
        super().__init__(error)
        self.error = error


class _Rejected(Exception):
    """Carries the most specific error once every option at a level failed."""

    def __init__(self, error: PkiError) -> None:
        super().__init__(error)
        self.error = error


def _first_success(
    default_error: PkiError, values: Iterable[T], attempt: Callable[[T], TrustAnchor]
) -> TrustAnchor:
    """Return the first successful attempt, keeping the most specific failure."""
    error = default_error
    for value in values:
        try:
            return attempt(value)
        except _Rejected as rejected:
            error = error.most_specific(rejected.error)
        except PkiError as err:
            if err.is_fatal:
                raise _Fatal(err) from None
            error = error.most_specific(err)
    raise _Rejected(error)


class PartialPath:
    """An end-entity certificate and the intermediates chosen so far above it."""

    def __init__(self, end_entity: Cert) -> None:
        self.end_entity = end_entity
        self._intermediates: list[Cert] = []

    @property
    def intermediates(self) -> tuple[Cert, ...]:
        """Intermediates in order from the end entity towards the trust anchor."""
        return tuple(self._intermediates)

    def __len__(self) -> int:
        return len(self._intermediates)

    def push(self, cert: Cert) -> None:
        """Add ``cert`` as the new head of the path."""
        if len(self._intermediates) >= MAX_SUB_CA_COUNT:
            raise PkiError(ErrorKind.MAXIMUM_PATH_DEPTH_EXCEEDED)
        self._intermediates.append(cert)

    def pop(self) -> None:
        """Remove the head intermediate, if there is one."""
        if self._intermediates:
            self._intermediates.pop()

    def head(self) -> Cert:
        """The certificate currently at the top of the path."""
        return self.get(len(self._intermediates))

    def get(self, index: int) -> Cert:
        """The certificate at ``index``; 0 is the end entity."""
        if index == 0:
            return self.end_entity
        return self._intermediates[index - 1]

    def node(self) -> PathNode:
        """A node positioned at the head of the path."""
        return PathNode(self, len(self._intermediates))


@dataclass(frozen=True)
class PathNode:
    """A position within a partial path."""

    path: PartialPath
    index: int

    @property
    def cert(self) -> Cert:
        """The certificate at this position."""
        return self.path.get(self.index)

    def iter(self) -> Iterator[PathNode]:
        """Yield this node and every node below it, down to the end entity."""
        for index in range(self.index, -1, -1):
            yield PathNode(self.path, index)

    def role(self) -> Role:
        """The role the certificate at this position plays."""
        return Role.END_ENTITY if self.index == 0 else Role.ISSUER


class VerifiedPath:
    """A path from an end-entity certificate to a trust anchor that has been verified."""

    def __init__(
        self, end_entity: Cert, intermediates: Sequence[Cert], anchor: TrustAnchor
    ) -> None:
        self._end_entity = end_entity
        self._intermediates = tuple(intermediates)
        self._anchor = anchor

    def intermediate_certificates(self) -> tuple[Cert, ...]:
        """The intermediates, from the one issuing the end entity upwards."""
        return self._intermediates

    def end_entity(self) -> Cert:
        """The end-entity certificate of this path."""
        return self._end_entity

    def anchor(self) -> TrustAnchor:
        """The trust anchor this path ends in."""
        return self._anchor

    def __repr__(self) -> str:
        return (
            f"VerifiedPath(end_entity={self._end_entity.subject!r}, "
            f"intermediates={len(self._intermediates)}, anchor={self._anchor.subject!r})"
        )


@dataclass
class ChainOptions:
    """Everything needed to build and verify a path for an end-entity certificate.

    ``verify_signature`` checks each signature on the path. ``revocation``,
    when given, is consulted for every certificate on a candidate path.
    ``check_name_constraints`` is called wherever name constraints apply; a
    path whose constraints cannot be checked is rejected. ``budget``, when
    given, supplies the starting limits; a fresh copy is used for every call.
    """

    eku: KeyUsage
    trust_anchors: Sequence[TrustAnchor]
    intermediate_certs: Sequence[Cert]
    verify_signature: SignatureVerifier
    revocation: Optional[RevocationChecker] = None
    check_name_constraints: Optional[NameConstraintsChecker] = None
    budget: Optional[Budget] = None

    def build_chain(
        self, end_entity: Cert, time: int, verify_path: Optional[PathVerifier] = None
    ) -> VerifiedPath:
        """Find and verify a path from ``end_entity`` to one of the trust anchors.

        ``verify_path``, when given, sees each otherwise valid candidate path
        and may reject it by raising PkiError, in which case building goes on.
        """
        path = PartialPath(end_entity)
        budget = dataclasses.replace(self.budget) if self.budget is not None else Budget()
        try:
            anchor = self._build_chain_inner(path, time, verify_path, 0, budget)
        except (_Fatal, _Rejected) as stop:
            raise stop.error from None
        return VerifiedPath(end_entity, path.intermediates, anchor)

    def _build_chain_inner(
        self,
        path: PartialPath,
        time: int,
        verify_path: Optional[PathVerifier],
        sub_ca_count: int,
        budget: Budget,
    ) -> TrustAnchor:
        role = path.node().role()
        check_issuer_independent_properties(path.head(), time, role, sub_ca_count, self.eku)

        def try_anchor(anchor: TrustAnchor) -> TrustAnchor:
            if path.head().issuer != anchor.subject:
                raise PkiError(ErrorKind.UNKNOWN_ISSUER)
            node = path.node()
            self._check_signed_chain(node, time, anchor, budget)
            self._check_chain_name_constraints(node, anchor, budget)
            if verify_path is None:
                return anchor
            candidate = VerifiedPath(path.end_entity, path.intermediates, anchor)
            try:
                verify_path(candidate)
            except PkiError as err:
                raise _Rejected(err) from None
            return anchor

        try:
            return _first_success(
                PkiError(ErrorKind.UNKNOWN_ISSUER), self.trust_anchors, try_anchor
            )
        except _Rejected as rejected:
            error = rejected.error

        def try_issuer(candidate: Cert) -> TrustAnchor:
            if candidate.subject != path.head().issuer:
                raise PkiError(ErrorKind.UNKNOWN_ISSUER)
            # Prevent loops (RFC 4158 section 5.2).
            if any(
                prev.cert.spki == candidate.spki and prev.cert.subject == candidate.subject
                for prev in path.node().iter()
            ):
                raise PkiError(ErrorKind.UNKNOWN_ISSUER)

            next_count = sub_ca_count if role is Role.END_ENTITY else sub_ca_count + 1
            budget.consume_build_chain_call()
            path.push(candidate)
            try:
                return self._build_chain_inner(path, time, verify_path, next_count, budget)
            except BaseException:
                path.pop()
                raise

        return _first_success(error, self.intermediate_certs, try_issuer)

    def _check_signed_chain(
        self, node: PathNode, time: int, anchor: TrustAnchor, budget: Budget
    ) -> None:
        spki = anchor.subject_public_key_info
        issuer_subject = anchor.subject
        issuer_key_usage: Optional[bytes] = None
        for step in node.iter():
            budget.consume_signature()
            self.verify_signature(spki, step.cert.signed_data)
            if self.revocation is not None:
                self.revocation(step, issuer_subject, spki, issuer_key_usage, budget, time)
            spki = step.cert.spki
            issuer_subject = step.cert.subject
            issuer_key_usage = step.cert.key_usage

    def _check_chain_name_constraints(
        self, node: PathNode, anchor: TrustAnchor, budget: Budget
    ) -> None:
        constraints = anchor.name_constraints
        for step in node.iter():
            if constraints is not None:
                checker = self.check_name_constraints
                if checker is None:
                    raise PkiError(ErrorKind.UNSUPPORTED_CRITICAL_EXTENSION)
                read_all(constraints, lambda reader, s=step: checker(reader, s, budget))
            constraints = step.cert.name_constraints