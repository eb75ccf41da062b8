"""
Input-validation and request-security layer.

Every handler goes through these modules before touching the store:
- sanitize: control/zero-width character stripping and NFKC
- addresses: SSRF hostname/IP classifier
- url_validator: redirect target validation and canonicalization
- slugs: strict (assignment) and loose (lookup) slug policies
- auth: constant-time bearer token check
- body: bounded JSON request body ingestion
"""
