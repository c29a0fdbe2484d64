"""AI providers and the HTTP backend that talks to them."""

import http.client
import json
import re
import ssl
import socket
import urllib.error
import urllib.request
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union

import certifi

from .prompts import system_prompt, user_prompt
from ..exceptions import ConfigurationError, TranslatorError
from ..utils.logging import module_logger

logger = module_logger('providers')

# SSL context for secure connections
SSL_CONTEXT = ssl.create_default_context(cafile=certifi.where())


class Provider(Enum):
    """Supported model providers. ``CUSTOM`` needs an explicit base URL."""
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    MISTRAL = "mistral"
    GROQ = "groq"
    DEEPSEEK = "deepseek"
    OLLAMA = "ollama"
    OPENROUTER = "openrouter"
    XAI = "xai"
    GEMINI = "gemini"
    CUSTOM = "custom"


# OpenAI-compatible endpoints
DEFAULT_BASE_URLS = {
    Provider.OPENAI: "https://api.openai.com/v1",
    Provider.ANTHROPIC: "https://api.anthropic.com/v1",
    Provider.MISTRAL: "https://api.mistral.ai/v1",
    Provider.GROQ: "https://api.groq.com/openai/v1",
    Provider.DEEPSEEK: "https://api.deepseek.com/v1",
    Provider.OLLAMA: "http://localhost:11434/v1",
    Provider.OPENROUTER: "https://openrouter.ai/api/v1",
    Provider.XAI: "https://api.x.ai/v1",
    Provider.GEMINI: "https://generativelanguage.googleapis.com/v1beta/openai",
}


@dataclass(frozen=True)
class ProviderSpec:
    """A resolved provider: enum variant, configured name and endpoint."""
    provider: Provider
    name: str
    base_url: str

    @property
    def is_custom(self) -> bool:
        return self.provider is Provider.CUSTOM

    @property
    def completions_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/chat/completions"


def resolve_provider(value: Union[str, Provider, None], base_url: Optional[str] = None) -> ProviderSpec:
    """
    Resolve a provider name to a :class:`ProviderSpec`.

    Known names map to their enum variant; ``base_url`` overrides the
    default endpoint. Unknown names become ``Provider.CUSTOM`` and require
    ``base_url``.

    Raises:
        ConfigurationError: Custom provider without a base URL
    """
    if isinstance(value, Provider):
        provider, name = value, value.value
    else:
        name = (value or Provider.OPENAI.value).strip().lower()
        try:
            provider = Provider(name)
        except ValueError:
            provider = Provider.CUSTOM

    url = base_url or DEFAULT_BASE_URLS.get(provider)
    if not url:
        raise ConfigurationError(f"Provider '{name}' requires a base_url")

    return ProviderSpec(provider=provider, name=name, base_url=url)


def extract_json_text(content: str) -> str:
    """Strip a Markdown code fence or surrounding prose from a JSON reply."""
    content = content.strip()
    if content.startswith("```"):
        fence_match = re.search(r"```(?:json)?\s*(.*?)\s*```", content, re.DOTALL)
        if fence_match:
            return fence_match.group(1).strip()

    first = content.find("{")
    last = content.rfind("}")
    if first != -1 and last != -1 and first < last:
        return content[first:last + 1]
    return content


def chat_content_from_response(data: Any) -> str:
    """Return ``choices[0].message.content`` or raise :class:`TranslatorError`."""
    choices = data.get("choices") if isinstance(data, dict) else None
    if not isinstance(choices, list) or not choices:
        raise TranslatorError("Invalid response: choices is empty")
    message = choices[0].get("message") if isinstance(choices[0], dict) else None
    if not isinstance(message, dict):
        raise TranslatorError("Invalid response: choices[0].message is missing")
    content = message.get("content")
    if not isinstance(content, str):
        raise TranslatorError("Invalid response: message.content is not a string")
    return content


def parse_translations(content: str) -> Dict[str, str]:
    """Parse the model's JSON object, keeping string values only."""
    try:
        payload = json.loads(extract_json_text(content))
    except json.JSONDecodeError as e:
        raise TranslatorError(f"Unparsable translation response: {e}") from e

    if not isinstance(payload, dict):
        raise TranslatorError("Translation response is not a JSON object")

    return {str(k): v for k, v in payload.items() if isinstance(v, str)}


class ChatCompletionBackend:
    """
    Posts translation requests to an OpenAI-compatible ``/chat/completions`` API.

    Every failure (network, timeout, HTTP status, malformed body) surfaces as
    :class:`TranslatorError`; retrying is the translator's job.
    """

    def __init__(
        self,
        spec: ProviderSpec,
        api_key: str = '',
        model: str = 'gpt-4o-mini',
        temperature: float = 0.2,
        timeout: float = 60.0,
        context: Optional[str] = None,
    ):
        self.spec = spec
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.timeout = timeout
        self.context = context

    def build_payload(self, strings: Mapping[str, str], source: str, target: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "temperature": self.temperature,
            "stream": False,
            "response_format": {"type": "json_object"},
            "messages": [
                {"role": "system", "content": system_prompt(self.context)},
                {"role": "user", "content": user_prompt(strings, source, target)},
            ],
        }

    def _headers(self) -> Dict[str, str]:
        headers = {'Content-Type': 'application/json'}
        if self.api_key:
            headers['Authorization'] = f'Bearer {self.api_key}'
        return headers

    def complete(self, strings: Mapping[str, str], source: str, target: str) -> Dict[str, str]:
        """
        Send one chunk and return the parsed ``{key: translation}`` object.

        Raises:
            TranslatorError: On any transport or response failure
        """
        body = json.dumps(self.build_payload(strings, source, target)).encode('utf-8')
        request = urllib.request.Request(
            self.spec.completions_url,
            data=body,
            method='POST',
            headers=self._headers(),
        )

        try:
            with urllib.request.urlopen(request, timeout=self.timeout, context=SSL_CONTEXT) as response:
                data = json.loads(response.read().decode('utf-8'))
        except urllib.error.HTTPError as e:
            raise TranslatorError(f"HTTP {e.code} from {self.spec.name}: {e.reason}") from e
        except urllib.error.URLError as e:
            raise TranslatorError(f"Network error: {e.reason}") from e
        except (socket.timeout, TimeoutError) as e:
            raise TranslatorError(f"Request timed out after {self.timeout}s") from e
        except (http.client.HTTPException, ConnectionError, OSError) as e:
            raise TranslatorError(f"Network error: {e!r}") from e
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise TranslatorError(f"Invalid JSON body: {e}") from e

        logger.debug(f"{self.spec.name} answered {source}->{target} for {len(strings)} strings")
        return parse_translations(chat_content_from_response(data))
