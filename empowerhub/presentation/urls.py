"""
Rotas da API REST do marketplace (camada de apresentação).
Todas as views são APIViews; a sessão guarda o token do colaborador de autenticação.
"""
from django.urls import path

from . import views


urlpatterns = [
    # ====================================================================
    # 1. AUTENTICAÇÃO
    # ====================================================================
    path('login/', views.LoginAPIView.as_view(), name='login'),
    path('logout/', views.LogoutAPIView.as_view(), name='logout'),

    # ====================================================================
    # 2. PRODUTOS E PORTFÓLIO (VENDEDOR)
    # ====================================================================
    path('api/products/', views.ProdutoListaAPIView.as_view(), name='api_produtos'),
    path('api/products/<str:pk>/', views.ProdutoDetalheAPIView.as_view(), name='api_produto_detalhe'),
    path('api/products/<str:pk>/reviews/', views.AvaliacoesAPIView.as_view(), name='api_avaliacoes'),
    path('api/products/<str:pk>/reviews/eligibility/', views.ElegibilidadeAvaliacaoAPIView.as_view(), name='api_avaliacao_elegibilidade'),
    path('api/portfolio/', views.PortfolioListaAPIView.as_view(), name='api_portfolio'),
    path('api/portfolio/<str:pk>/', views.PortfolioDetalheAPIView.as_view(), name='api_portfolio_detalhe'),

    # ====================================================================
    # 3. ÁREA DO COMPRADOR
    # ====================================================================
    path('api/addresses/', views.EnderecoListaAPIView.as_view(), name='api_enderecos'),
    path('api/addresses/<str:pk>/', views.EnderecoDetalheAPIView.as_view(), name='api_endereco_detalhe'),
    path('api/profile/', views.PerfilAPIView.as_view(), name='api_perfil'),
    path('api/profile/password/', views.AlterarSenhaAPIView.as_view(), name='api_alterar_senha'),
    path('api/donations/intent/', views.DoacaoIntencaoAPIView.as_view(), name='api_doacao_intencao'),
    path('api/donations/process/', views.DoacaoProcessarAPIView.as_view(), name='api_doacao_processar'),

    # ====================================================================
    # 4. ROTAS ADMINISTRATIVAS
    # ====================================================================
    path('api/orders/', views.PedidoListaAPIView.as_view(), name='api_pedidos'),
    path('api/orders/<str:pk>/', views.PedidoDetalheAPIView.as_view(), name='api_pedido_detalhe'),
    path('api/orders/<str:pk>/status/', views.PedidoStatusAPIView.as_view(), name='api_pedido_status'),
    path('api/reports/sales/', views.RelatorioVendasAPIView.as_view(), name='api_relatorio_vendas'),
    path('api/reports/products/', views.RelatorioProdutosAPIView.as_view(), name='api_relatorio_produtos'),
    path('api/reports/dashboard/', views.PainelAPIView.as_view(), name='api_painel'),

    # ====================================================================
    # 5. FORMULÁRIOS
    # ====================================================================
    path('api/forms/<str:nome>/', views.FormularioAPIView.as_view(), name='api_formulario'),
    path('api/forms/<str:nome>/validate/', views.ValidarFormularioAPIView.as_view(), name='api_validar_formulario'),
]
