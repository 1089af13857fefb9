"""Núcleo do sistema: ciclo de vida das instâncias e entrega de webhooks.

Subpastas:
- bootstrap/: composition root (factories, inicialização, wiring)
- domain/: modelos (Instance, WebhookEvent, WebhookStats)
- services/: registry, controller de conexão, dispatcher, stats
- infra/: implementações concretas de IO (provider stub, HTTP, assinatura)
- protocols/: contratos/interfaces (ConnectionProvider)
- observability/: correlation_id e métricas

Padrão: app executa; api adapta; fsm governa; utils apoia.
"""
