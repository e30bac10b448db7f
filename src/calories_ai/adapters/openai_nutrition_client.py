"""OpenAI Chat Completions client for nutrition estimates."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from calories_ai.services.analysis import NutritionModelClient


@dataclass
class OpenAINutritionClient(NutritionModelClient):
    """Nutrition model client backed by OpenAI chat completions."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAINutritionClient":
        """Create an OpenAI nutrition client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def complete(
        self,
        *,
        model: str,
        messages: list[dict[str, object]],
        max_tokens: int,
    ) -> str | None:
        """Request a JSON object completion and return its text."""
        response = await self.client.chat.completions.create(
            model=model,
            messages=messages,
            max_tokens=max_tokens,
            response_format={"type": "json_object"},
        )
        if not response.choices:
            return None
        return response.choices[0].message.content

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.close()
