# pkipath

`pkipath` builds certification paths for X.509 certificates. It starts at an
end-entity certificate, tries candidate intermediate certificates, and stops
when it reaches a trust anchor. Each certificate on a candidate path is
checked for its validity period, basic constraints and extended key usage.
The signatures along the path are then checked, together with revocation and
name constraints where the caller supplies the checks for them.

It uses only the standard library.

## Installation

```
pip install pkipath
```

## Modules

- `pkipath.der` is a small DER reader. It provides the `Tag` values and a
  `Reader` with these methods:
  - `read_tag_and_value`
  - `expect_tag`
  - `read_bool`, which reads an optional BOOLEAN and treats an absent one as
    false
  - `read_small_nonnegative_integer`, which accepts values from 0 to 255
  - `read_time`, which reads a UTCTime or GeneralizedTime as seconds since the
    Unix epoch
  - `at_end`
  - `skip_to_end`

  `read_all(data, func)` runs `func` over the whole buffer and raises `BadDer`
  if any bytes are left over. If `data` is `None`, `func` is called with `None`.
- `pkipath.x509` provides the following:
  - `Extension.from_reader` and `Extension.check_unsupported`, which rejects
    critical extensions.
  - `DistributionPointName.from_reader`. Its result holds either a full name
    or nothing at all, where nothing means the name is relative to the CRL
    issuer.
  - `set_extension_once`, which raises `ExtensionValueInvalid` when an
    extension appears twice.
  - `remember_extension`, which passes the last OID octet of an id-ce (2.5.29)
    extension to a handler. Other extensions are ignored, or rejected if they
    are critical.
- `pkipath.certificate` provides the frozen records `SignedData`, `Cert` and
  `TrustAnchor`. Bytes-like fields are normalised to `bytes`.
- `pkipath.eku` provides the following:
  - `KeyUsage`, built with `server_auth()`, `client_auth()`, `required(oid)`
    or `required_if_present(oid)`.
  - `KeyUsage.oid_values()`.
  - `KeyUsage.check(reader)`, which raises `RequiredEkuNotFoundError` and
    attaches a `RequiredEkuNotFoundContext` listing the purposes that were
    present.
  - `KeyPurposeId` and `decode_oid`.
- `pkipath.checks` provides the following:
  - `Role`.
  - `Budget`, with its `consume_signature`, `consume_build_chain_call` and
    `consume_name_constraint_comparison` methods.
  - The checks that do not depend on the issuer: `check_validity`,
    `check_basic_constraints` and `check_issuer_independent_properties`.
- `pkipath.path` provides the following:
  - `ChainOptions.build_chain`, which returns a `VerifiedPath`. The result has
    `end_entity()`, `anchor()` and `intermediate_certificates()`.
  - `PartialPath` and `PathNode`, which are used while a path is being built.
- `pkipath.errors` provides `PkiError`, which carries an `ErrorKind`. It also
  provides `CertNotValidYetError` and `CertExpiredError`.

## Example

```python
from pkipath.eku import KeyUsage, decode_oid

usage = KeyUsage.server_auth()
print(list(usage.oid_values()))                      # [1, 3, 6, 1, 5, 5, 7, 3, 1]
print(list(decode_oid(bytes([0x84, 0x37, 0x03]))))   # [2, 999, 3]
```

## Path building

A `Cert` holds the DER contents of the parts of a certificate that path
building looks at:

- issuer and subject names
- SubjectPublicKeyInfo
- the `SignedData`
- the Validity
- these extensions, each optional: basic constraints, EKU, name constraints
  and key usage

The caller supplies the signature check.

```python
from pkipath.eku import KeyUsage
from pkipath.errors import ErrorKind, PkiError
from pkipath.path import ChainOptions

def verify_signature(spki: bytes, signed_data) -> None:
    ...  # raise PkiError(ErrorKind.INVALID_SIGNATURE_FOR_PUBLIC_KEY) on failure

options = ChainOptions(
    eku=KeyUsage.server_auth(),
    trust_anchors=anchors,            # TrustAnchor records
    intermediate_certs=intermediates, # Cert records
    verify_signature=verify_signature,
)
path = options.build_chain(end_entity, time=1_700_000_000)
```

`ChainOptions` also takes three optional callables:

- `revocation` is called as
  `(node, issuer_subject, issuer_spki, issuer_key_usage, budget, time)` for
  each certificate on a candidate path.
- `check_name_constraints` is called as `(reader, node, budget)` wherever the
  trust anchor or an intermediate carries name constraints. If none is given,
  a path that carries name constraints is rejected with
  `UnsupportedCriticalExtension`.
- `budget` is a `Budget` that sets the starting limits. A fresh copy of it is
  used for every `build_chain` call.

`build_chain` also takes an optional `verify_path` callable. It receives each
candidate `VerifiedPath` that passes the checks above. If it raises
`PkiError`, that candidate is rejected and path building moves on to the next
one.

When no path can be built, `build_chain` raises `PkiError`. Running out of any
of the three budgets stops the search at once. Other failures do not stop it;
they are ranked by how specific they are, and the most specific one is raised
after every candidate has been tried. A failure from `verify_path` is ranked
the same way.

## Limits

- A path holds at most six intermediate certificates. Going deeper fails with
  `MaximumPathDepthExceeded`, and the search tries other candidates.
- The default `Budget` allows 100 signature checks per `build_chain` call.
- It allows 200,000 path-building calls.
- It allows 250,000 name constraint comparisons.

## What it does not do

`pkipath` leaves the following to the caller:

- It does not parse whole certificates into `Cert` records. The caller
  supplies their contents.
- It implements no signature algorithms, no revocation list handling and no
  name constraint matching. These are plugged in as callables on
  `ChainOptions`.
- It has no subject name or host name verification.
- It has no command-line tool.