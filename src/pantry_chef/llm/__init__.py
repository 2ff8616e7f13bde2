"""Azure OpenAI chat-completion client and recipe prompts."""
