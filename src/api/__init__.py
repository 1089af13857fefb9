"""API: camada de borda HTTP.

Subpastas:
- routes/: endpoints (health, instâncias, webhooks, ações)
- schemas/: modelos de request e envelope de resposta
- dependencies/: auth por API key e acesso aos serviços
- errors/: exception handlers (envelope de erro)
- middleware/: correlation_id e latência

NÃO PODE conter: FSM, regras de entrega de webhook, IO de provider.
"""
