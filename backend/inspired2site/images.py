"""
Image generation and upload helpers.

Generation goes to the Hugging Face inference API when a key is
configured; any failure (or no key) returns a 1x1 transparent PNG.
"""

import base64

import httpx

from inspired2site.config import Capabilities, Settings, get_settings
from inspired2site.models import GeneratedImage, UploadedImage

HF_INFERENCE_URL = "https://api-inference.huggingface.co/models/{model}"
DEFAULT_PROMPT = "transparent product mockup"
DEMO_IMAGE = (
    "data:image/png;base64,"
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR4nGNgYAAAAAMAASsJTYQAAAAASUVORK5CYII="
)


def to_data_uri(data: bytes, mime: str = "image/png") -> str:
    b64 = base64.b64encode(data).decode("utf-8")
    return f"data:{mime};base64,{b64}"


def fallback_image() -> GeneratedImage:
    return GeneratedImage(mime="image/png", data=DEMO_IMAGE, source="fallback-demo")


async def call_hf_inference(
    prompt: str,
    client: httpx.AsyncClient,
    settings: Settings,
) -> bytes:
    """POST the prompt to the configured model, return raw image bytes."""
    resp = await client.post(
        HF_INFERENCE_URL.format(model=settings.hf_model),
        json={"inputs": prompt, "options": {"wait_for_model": True}},
        headers={"Authorization": f"Bearer {settings.hf_api_key}"},
        timeout=settings.image_timeout,
    )
    if resp.status_code != 200:
        raise RuntimeError(f"HF inference error ({resp.status_code}): {resp.text[:300]}")
    return resp.content


async def generate_image(
    prompt: str | None,
    capabilities: Capabilities,
    *,
    client: httpx.AsyncClient | None = None,
    settings: Settings | None = None,
) -> GeneratedImage:
    prompt = (prompt or "").strip() or DEFAULT_PROMPT
    if not capabilities.external_images:
        return fallback_image()

    settings = settings or get_settings()
    try:
        if client is None:
            async with httpx.AsyncClient() as owned:
                data = await call_hf_inference(prompt, owned, settings)
        else:
            data = await call_hf_inference(prompt, client, settings)
    except Exception as e:
        print(f"[image] HF generation failed, using demo image: {e}")
        return fallback_image()

    return GeneratedImage(mime="image/png", data=to_data_uri(data), source="external-model")


def encode_upload(data: bytes, content_type: str | None = None) -> UploadedImage:
    """Pass-through: wrap caller bytes in a data URI. No format validation."""
    mime = content_type if content_type and content_type.startswith("image/") else "image/png"
    return UploadedImage(data=to_data_uri(data, mime))
