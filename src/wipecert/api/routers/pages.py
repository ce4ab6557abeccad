"""HTML page routes.

Routes:
- /verify/{record_id} : human-readable verification page, the target of
  the certificate QR code

Note: these routes render templates. The JSON API is in the verify router.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse

from wipecert.api.dependencies import Signer, Templates, VerifierDep

router = APIRouter(tags=["pages"])


@router.get("/verify/{record_id}", response_class=HTMLResponse)
async def verify_page(
    request: Request,
    record_id: str,
    verifier: VerifierDep,
    context: Signer,
    templates: Templates,
) -> HTMLResponse:
    """Render the verification page for a certificate.

    Shows whether the signature is valid, the stored metadata, the text
    snippet, the issuer public key and download links. Unknown ids get a
    404 page.
    """
    result = await verifier.verify(record_id)

    if not result.found:
        return templates.TemplateResponse(
            request,
            "not_found.html",
            {"record_id": record_id},
            status_code=404,
        )

    record = result.record
    page_context = {
        "record": record,
        "valid": result.valid,
        "signature": result.signature,
        "public_key_pem": context.public_key_pem,
        "certificate_url": f"/uploads/{record.certificate_name}",
        "qr_url": f"/uploads/{record.qr_name}",
        "download_url": f"/download/{record.id}",
    }
    return templates.TemplateResponse(request, "verify.html", page_context)
