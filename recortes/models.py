# recortes/models.py
"""
Modelo do catálogo de recortes
"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, UniqueConstraint

from auth.models import generate_id
from database.connection import Base
from utils.timezone import now_utc, to_iso


class Recorte(Base):
    """
    Recorte (peça cortada) do catálogo.

    sku é único globalmente; ordem é única dentro do mesmo tipo_produto.
    As duas restrições também existem no banco, além das checagens do serviço.
    """

    __tablename__ = "recortes"
    __table_args__ = (
        UniqueConstraint("tipo_produto", "ordem", name="uq_recortes_tipo_produto_ordem"),
    )

    id = Column(String(32), primary_key=True, default=generate_id)
    nome = Column(String(200), nullable=False)
    ordem = Column(Integer, nullable=False)
    sku = Column(String(100), unique=True, index=True, nullable=False)
    tipo_recorte = Column(String(50), nullable=False)
    posicao = Column(String(50), nullable=False)
    tipo_produto = Column(String(50), nullable=False, index=True)
    material = Column(String(50), nullable=False)
    cor = Column(String(50), nullable=False)
    url_imagem = Column(String(500), nullable=False)
    status = Column(Boolean, nullable=False, default=True)  # True = ativo
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc, nullable=False)

    def to_dict(self) -> dict:
        """Representação JSON (nomes de campo da API)."""
        return {
            "id": self.id,
            "nome": self.nome,
            "ordem": self.ordem,
            "sku": self.sku,
            "tipoRecorte": self.tipo_recorte,
            "posicao": self.posicao,
            "tipoProduto": self.tipo_produto,
            "material": self.material,
            "cor": self.cor,
            "urlImagem": self.url_imagem,
            "status": self.status,
            "createdAt": to_iso(self.created_at),
            "updatedAt": to_iso(self.updated_at),
        }

    def __repr__(self):
        return f"<Recorte(id={self.id}, sku='{self.sku}', tipo_produto='{self.tipo_produto}', ordem={self.ordem})>"


# Nome do campo na API -> atributo do modelo
API_TO_COLUMN = {
    "nome": "nome",
    "ordem": "ordem",
    "sku": "sku",
    "tipoRecorte": "tipo_recorte",
    "posicao": "posicao",
    "tipoProduto": "tipo_produto",
    "material": "material",
    "cor": "cor",
    "urlImagem": "url_imagem",
    "status": "status",
    "createdAt": "created_at",
}
