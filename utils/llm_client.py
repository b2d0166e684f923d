"""
LLM Client with Groq primary and HuggingFace Inference fallback
"""
import time
from enum import Enum
from typing import Any, Dict, List, Optional

from groq import Groq
from huggingface_hub import InferenceClient

from config import settings
from utils.logger import logger


class LLMProvider(str, Enum):
    """LLM Provider types"""
    GROQ = "groq"
    HUGGINGFACE = "huggingface"


class LLMClient:
    """
    Unified text-generation client with provider fallback

    Primary: Groq (Llama 3.1 8B Instant)
    Fallback: HuggingFace Inference API

    Each provider is tried exactly once per call. Callers that need a hard
    deadline enforce it themselves.
    """

    def __init__(self):
        self.groq_client = None
        self.huggingface_client = None
        self._initialize_groq()
        self._initialize_huggingface()

    def _initialize_groq(self) -> None:
        """Initialize Groq API client"""
        if not settings.GROQ_API_KEY:
            logger.info("GROQ_API_KEY not configured, skipping Groq initialization")
            return

        try:
            self.groq_client = Groq(
                api_key=settings.GROQ_API_KEY,
                timeout=settings.GROQ_TIMEOUT,
                max_retries=0,
            )
            logger.info(f"Groq API client initialized (model: {settings.GROQ_MODEL})")
        except Exception as e:
            logger.warning(f"Failed to initialize Groq client: {e}")
            self.groq_client = None

    def _initialize_huggingface(self) -> None:
        """Initialize HuggingFace Inference API client"""
        if not settings.HF_API_KEY:
            logger.info("HF_API_KEY not configured, HuggingFace fallback unavailable")
            return

        try:
            self.huggingface_client = InferenceClient(
                token=settings.HF_API_KEY,
                timeout=settings.HF_TIMEOUT,
            )
            logger.info("HuggingFace Inference API client initialized successfully")
        except Exception as e:
            logger.warning(f"Failed to initialize HuggingFace client: {type(e).__name__}: {e}")
            self.huggingface_client = None

    @staticmethod
    def _messages(prompt: str, system_prompt: Optional[str]) -> List[Dict[str, str]]:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})
        return messages

    @staticmethod
    def _response(response, provider: LLMProvider, model: str, latency: float) -> Dict[str, Any]:
        tokens_in = 0
        tokens_out = 0
        if getattr(response, "usage", None):
            tokens_in = response.usage.prompt_tokens or 0
            tokens_out = response.usage.completion_tokens or 0

        return {
            "content": response.choices[0].message.content or "",
            "provider": provider.value,
            "model": model,
            "latency": latency,
            "tokens": {"input": tokens_in, "output": tokens_out},
        }

    def _invoke_groq(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        max_tokens: int = None,
        temperature: float = None,
    ) -> Dict[str, Any]:
        """
        Invoke Groq chat completion

        Returns:
            Response dict with content and metadata
        """
        if not self.groq_client:
            raise RuntimeError("Groq client not initialized")

        start_time = time.time()
        try:
            response = self.groq_client.chat.completions.create(
                model=settings.GROQ_MODEL,
                messages=self._messages(prompt, system_prompt),
                max_tokens=max_tokens or settings.NARRATIVE_MAX_TOKENS,
                temperature=temperature if temperature is not None else settings.NARRATIVE_TEMPERATURE,
                stream=False,
            )
        except Exception as e:
            logger.error(f"Groq API error: {e}")
            raise
        return self._response(response, LLMProvider.GROQ, settings.GROQ_MODEL, time.time() - start_time)

    def _invoke_huggingface(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        max_tokens: int = None,
        temperature: float = None,
    ) -> Dict[str, Any]:
        """Invoke HuggingFace chat completion"""
        if not self.huggingface_client:
            raise RuntimeError("HuggingFace client not initialized")

        start_time = time.time()
        try:
            response = self.huggingface_client.chat_completion(
                messages=self._messages(prompt, system_prompt),
                model=settings.HF_MODEL,
                max_tokens=max_tokens or settings.NARRATIVE_MAX_TOKENS,
                temperature=temperature if temperature is not None else settings.NARRATIVE_TEMPERATURE,
            )
        except Exception as e:
            logger.error(f"HuggingFace invocation error: {e}")
            raise
        return self._response(response, LLMProvider.HUGGINGFACE, settings.HF_MODEL, time.time() - start_time)

    def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        max_tokens: int = None,
        temperature: float = None,
    ) -> Dict[str, Any]:
        """
        Generate a completion, falling back from Groq to HuggingFace

        Args:
            prompt: User prompt
            system_prompt: Optional system prompt
            max_tokens: Maximum tokens to generate
            temperature: Sampling temperature

        Returns:
            Response dict with content and metadata

        Raises:
            RuntimeError if no provider is configured or all of them fail
        """
        errors = []

        if self.groq_client:
            try:
                logger.info(f"Using Groq model={settings.GROQ_MODEL}")
                return self._invoke_groq(prompt, system_prompt, max_tokens, temperature)
            except Exception as groq_error:
                logger.warning(f"Groq failed: {groq_error}")
                errors.append(f"Groq: {groq_error}")

        if self.huggingface_client:
            try:
                logger.info("Falling back to HuggingFace Inference API")
                return self._invoke_huggingface(prompt, system_prompt, max_tokens, temperature)
            except Exception as hf_error:
                logger.warning(f"HuggingFace fallback failed: {hf_error}")
                errors.append(f"HuggingFace: {hf_error}")

        if not errors:
            raise RuntimeError("No text-generation provider configured")
        raise RuntimeError(f"All configured LLM providers failed: {'; '.join(errors)}")

    def is_available(self, provider: Optional[LLMProvider] = None) -> bool:
        """True if the given provider (or any provider) is configured"""
        if provider == LLMProvider.GROQ:
            return self.groq_client is not None
        if provider == LLMProvider.HUGGINGFACE:
            return self.huggingface_client is not None
        return self.groq_client is not None or self.huggingface_client is not None


# Global LLM client instance
llm_client = LLMClient()
