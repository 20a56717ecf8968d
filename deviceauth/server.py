"""FastAPI-powered device challenge-response service."""

from __future__ import annotations

from typing import Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from .config import Settings
from .exceptions import InvalidMultiplier, NotInitialized, NotRegistered
from .log import configure_logging
from .service import DeviceAuthService


class ParametersResponse(BaseModel):
    generator: str
    modulus: str


class RegisterRequest(BaseModel):
    identity: str
    commitment: str


class RegisterResponse(BaseModel):
    identity: str
    commitment: str


class ChallengeResponse(BaseModel):
    exponent: str
    multiplier: str


class VerifyRequest(BaseModel):
    identity: str
    exponent: str
    response: str
    multiplier: str


class VerifyResponse(BaseModel):
    identity: str
    success: bool


def _parse_hex(value: str, field: str) -> int:
    try:
        parsed = int(value, 16)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"{field} must be hex encoded") from exc
    if parsed < 0:
        raise HTTPException(status_code=400, detail=f"{field} must be non-negative")
    return parsed


def create_app(service: Optional[DeviceAuthService] = None) -> FastAPI:
    if service is None:
        settings = Settings()
        configure_logging(settings.log_level)
        service = DeviceAuthService.from_settings(settings)

    app = FastAPI(title="DeviceAuth", description="Blinded challenge-response device authentication")
    app.state.service = service

    def _params() -> ParametersResponse:
        try:
            params = service.params
        except NotInitialized as exc:
            raise HTTPException(status_code=503, detail=str(exc)) from exc
        return ParametersResponse(generator=hex(params.generator), modulus=hex(params.modulus))

    @app.get("/parameters", response_model=ParametersResponse)
    def parameters() -> ParametersResponse:
        return _params()

    @app.post("/register", response_model=RegisterResponse)
    def register(request: RegisterRequest) -> RegisterResponse:
        commitment = _parse_hex(request.commitment, "Commitment")
        try:
            service.register(request.identity, commitment)
        except NotInitialized as exc:
            raise HTTPException(status_code=503, detail=str(exc)) from exc
        return RegisterResponse(identity=request.identity, commitment=hex(commitment))

    @app.post("/challenge", response_model=ChallengeResponse)
    def challenge() -> ChallengeResponse:
        _params()
        issued = service.issue_challenge()
        return ChallengeResponse(exponent=hex(issued.exponent), multiplier=hex(issued.multiplier))

    @app.post("/verify", response_model=VerifyResponse)
    def verify(request: VerifyRequest) -> VerifyResponse:
        exponent = _parse_hex(request.exponent, "Exponent")
        response = _parse_hex(request.response, "Response")
        multiplier = _parse_hex(request.multiplier, "Multiplier")
        try:
            success = service.verify(request.identity, exponent, response, multiplier)
        except NotRegistered as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except InvalidMultiplier as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        except NotInitialized as exc:
            raise HTTPException(status_code=503, detail=str(exc)) from exc
        return VerifyResponse(identity=request.identity, success=success)

    return app


__all__ = ["create_app"]
