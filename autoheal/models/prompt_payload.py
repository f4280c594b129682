"""
Prompt Payload Model
====================
The rendered request for the model provider.

    system_instructions — fixed role / expertise description
    user_content        — the filled-in user template
    model_parameters    — model, max_output_tokens, temperature (configuration
                          constants, never derived from the failure)

``to_request_body()`` produces the exact OpenAI-compatible body that is
persisted for the external call.
"""
from pydantic import BaseModel, ConfigDict


class ModelParameters(BaseModel):
    model_config = ConfigDict(frozen=True)

    model: str
    max_output_tokens: int
    temperature: float


class PromptPayload(BaseModel):
    model_config = ConfigDict(frozen=True)

    system_instructions: str
    user_content: str
    model_parameters: ModelParameters

    def to_request_body(self) -> dict:
        return {
            "model": self.model_parameters.model,
            "messages": [
                {"role": "system", "content": self.system_instructions},
                {"role": "user", "content": self.user_content},
            ],
            "max_tokens": self.model_parameters.max_output_tokens,
            "temperature": self.model_parameters.temperature,
        }


class PayloadMetrics(BaseModel):
    test_lines: int
    dom_chars: int
    payload_chars: int
