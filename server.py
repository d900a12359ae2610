"""
FastAPI Server for the MQL5 Strategy Builder

Endpoints:
- GET /status - Health check
- GET /indicators - Supported indicators, their parameters and outputs
- POST /strategy/validate - Validate a strategy form payload
- POST /strategy/compile - Compile a strategy form into the EA request prompt
- POST /strategy/generate - Compile a strategy form and generate the Expert Advisor
"""

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from typing import Dict, Any, Optional, List
import os
from dotenv import load_dotenv

from ai_providers import get_provider
from condition_list import Condition
from ea_code_generator import EACodeGenerator
from ea_prompts import GENERATION_FAILURE_GUIDANCE
from indicator_registry import registry_snapshot
from indicators import Indicator
from output_catalog import OutputRef
from strategy_builder import StrategyBuilder
from strategy_form_schema import validate_strategy_form
from strategy_prompt_compiler import RiskParameters, StrategyMetadata

from contextlib import asynccontextmanager

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown events"""
    print("=" * 60)
    print("MQL5 Strategy Builder")
    print("=" * 60)
    print(f"Provider: {AI_PROVIDER.upper()}")
    print(f"Model: {AI_MODEL}")
    print("=" * 60)
    yield

# Load environment variables
load_dotenv()

# Initialize FastAPI app
app = FastAPI(
    title="MQL5 Strategy Builder",
    description="Compile structured trading strategies into MQL5 Expert Advisor requests",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ============================================================================
# CONFIGURATION
# ============================================================================

AI_PROVIDER = os.getenv("AI_PROVIDER", "anthropic").lower()
AI_MODEL = os.getenv("AI_MODEL", None)

# Get API key based on provider
if AI_PROVIDER == "anthropic":
    AI_API_KEY = os.getenv("ANTHROPIC_API_KEY")
    if not AI_API_KEY:
        raise ValueError("Missing ANTHROPIC_API_KEY environment variable")
    DEFAULT_MODEL = "claude-sonnet-4-5"
elif AI_PROVIDER == "openai":
    AI_API_KEY = os.getenv("OPENAI_API_KEY")
    if not AI_API_KEY:
        raise ValueError("Missing OPENAI_API_KEY environment variable")
    DEFAULT_MODEL = "gpt-5.2"
else:
    raise ValueError(f"Invalid AI_PROVIDER: {AI_PROVIDER}. Must be 'openai' or 'anthropic'")

AI_MODEL = AI_MODEL or DEFAULT_MODEL

# ============================================================================
# INITIALIZE GENERATOR
# ============================================================================

ai_provider = get_provider(
    api_key=AI_API_KEY,
    model=AI_MODEL,
    provider=AI_PROVIDER
)
ea_code_generator = EACodeGenerator(ai_provider=ai_provider)


# ============================================================================
# REQUEST / RESPONSE MODELS
# ============================================================================

class StrategyFormRequest(BaseModel):
    """A complete strategy builder form"""
    metadata: StrategyMetadata
    risk: RiskParameters
    indicators: List[Indicator] = Field(default_factory=list)
    entry_conditions: List[Condition] = Field(default_factory=list)
    exit_conditions: List[Condition] = Field(default_factory=list)

    class Config:
        json_schema_extra = {
            "example": {
                "metadata": {"name": "RsiBounce", "symbol": "BTCUSDT", "timeframe": "H1"},
                "risk": {"stop_loss": "50", "take_profit": "100", "lot_size": "0.01"},
                "indicators": [{"kind": "RSI", "period": 14}],
                "entry_conditions": [
                    {"subject": "RSI_1", "operator": "<", "value_kind": "literal", "value": 30}
                ],
                "exit_conditions": [
                    {"subject": "RSI_1", "operator": ">", "value_kind": "literal", "value": 70}
                ],
            }
        }


class CompileResponse(BaseModel):
    prompt: str
    catalog: List[OutputRef]


class GenerateResponse(BaseModel):
    """Response from Expert Advisor generation"""
    success: bool
    prompt: Optional[str] = None
    response: Optional[str] = None
    mql5_code: Optional[str] = None
    error: Optional[str] = None
    guidance: Optional[str] = None


class ValidateResponse(BaseModel):
    valid: bool
    errors: List[Dict[str, str]]


class StatusResponse(BaseModel):
    """Status check response"""
    status: str
    provider: str
    model: str


def _build(request: StrategyFormRequest) -> StrategyBuilder:
    try:
        return StrategyBuilder.from_form(
            request.indicators,
            request.entry_conditions,
            request.exit_conditions,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


# ============================================================================
# ENDPOINTS
# ============================================================================

@app.get("/status", response_model=StatusResponse)
async def status():
    """Health check endpoint"""
    return StatusResponse(
        status="running",
        provider=AI_PROVIDER,
        model=AI_MODEL,
    )


@app.get("/indicators")
async def indicators() -> List[Dict[str, Any]]:
    """Supported indicator kinds with parameter defaults and named outputs."""
    return registry_snapshot()


@app.post("/strategy/validate", response_model=ValidateResponse)
async def validate_strategy(form: Dict[str, Any]):
    """Validate a raw strategy form payload without compiling it."""
    valid, errors = validate_strategy_form(form)
    return ValidateResponse(valid=valid, errors=errors)


@app.post("/strategy/compile", response_model=CompileResponse)
async def compile_strategy(request: StrategyFormRequest):
    """Compile a strategy form into the Expert Advisor request prompt."""
    builder = _build(request)
    try:
        prompt = builder.compile(request.metadata, request.risk)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return CompileResponse(prompt=prompt, catalog=builder.catalog)


@app.post("/strategy/generate", response_model=GenerateResponse)
async def generate_strategy(request: StrategyFormRequest):
    """
    Compile a strategy form and hand the prompt to the AI provider.

    Generation failures are reported in the response body together with
    troubleshooting guidance for the user.
    """
    builder = _build(request)
    try:
        print(f"\n{'='*60}")
        print(f"📥 Generating Expert Advisor: {request.metadata.name}")
        print(f"{'='*60}")

        result = await ea_code_generator.generate_from_builder(builder, request.metadata, request.risk)

        print("✅ Expert Advisor generated")
        print(f"{'='*60}\n")

        return GenerateResponse(
            success=True,
            prompt=result["prompt"],
            response=result["response"],
            mql5_code=result["mql5_code"],
        )
    except Exception as e:
        print(f"❌ Generation failed: {str(e)}")
        print(f"{'='*60}\n")
        return GenerateResponse(
            success=False,
            error=str(e),
            guidance=GENERATION_FAILURE_GUIDANCE.strip(),
        )


# ============================================================================
# STARTUP
# ============================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "server:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", 8000)),
        reload=True
    )
