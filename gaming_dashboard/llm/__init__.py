"""
Text-generation layer: the two interchangeable content providers
(OpenAI and Anthropic Claude) used by the Content agent.
"""
