import asyncio
import logging
from io import BytesIO
from typing import Any, Dict, List, Optional, Sequence

from openpyxl import load_workbook
from supabase import Client

from errors import InvalidRequest
from repositories.catalog_repository import (
    archive_missing,
    find_modele_id,
    insert_modele,
    upsert_produit,
)
from schemas import CatalogImportSummary
from supabase_client import AdminClientFactory, PROVIDER_ERRORS

logger = logging.getLogger("phenix-commandes")

DEFAULT_CATEGORY = "echantillon_lri"
TRUE_VALUES = {"TRUE", "VRAI"}


def _cell(row: Sequence[Any], index: int) -> Optional[str]:
    if index >= len(row) or row[index] is None:
        return None
    text = str(row[index]).strip()
    return text or None


def _is_true(value: Any) -> bool:
    if value is True:
        return True
    return isinstance(value, str) and value.strip().upper() in TRUE_VALUES


def read_rows(content: bytes) -> List[Sequence[Any]]:
    """Data rows of the first sheet, header skipped, blank rows dropped."""
    try:
        wb = load_workbook(BytesIO(content), read_only=True, data_only=True)
    except Exception as exc:
        raise InvalidRequest("Fichier Excel illisible", details=str(exc)) from exc
    try:
        ws = wb.worksheets[0]
        rows = []
        for index, row in enumerate(ws.iter_rows(values_only=True)):
            if index == 0:
                continue
            if _cell(row, 0) or _cell(row, 1) or _cell(row, 2):
                rows.append(row)
        return rows
    finally:
        wb.close()


def is_sample_category(category: str) -> bool:
    return "echantillon" in category


class CatalogImport:
    def __init__(self, client: Client, category: str) -> None:
        self._client = client
        self.category = category
        self.summary = CatalogImportSummary()
        self.processed_ids: List[str] = []

    def _resolve_modele(self, nom: str) -> Optional[str]:
        try:
            existing = find_modele_id(self._client, nom)
        except PROVIDER_ERRORS as exc:
            logger.warning("Lookup of modele %r failed: %s", nom, exc)
            existing = None
        if existing:
            return existing
        try:
            inserted = insert_modele(self._client, nom)
        except PROVIDER_ERRORS as exc:
            logger.error("Insert of modele %r failed: %s", nom, exc)
            return None
        if inserted:
            self.summary.modeles += 1
        return inserted

    def _upsert(self, record: Dict[str, Any], on_conflict: str) -> None:
        try:
            produit_id = upsert_produit(self._client, record, on_conflict=on_conflict)
        except PROVIDER_ERRORS as exc:
            logger.error("Import error on %s: %s", record.get("reference"), exc)
            self.summary.erreurs += 1
            return
        self.summary.produits += 1
        if produit_id:
            self.processed_ids.append(produit_id)

    def import_samples(self, rows: List[Sequence[Any]]) -> None:
        modeles: Dict[str, Optional[str]] = {}
        for row in rows:
            nom = _cell(row, 0)
            if nom and nom not in modeles:
                modeles[nom] = self._resolve_modele(nom)

        for row in rows:
            modele_nom = _cell(row, 0)
            modele_id = modeles.get(modele_nom) if modele_nom else None
            if not modele_id:
                continue
            reference = _cell(row, 2)
            type_tissu = _cell(row, 3)
            couleur = _cell(row, 4)
            record = {
                "nom": f"{modele_nom} - {reference or ''}",
                "reference": reference,
                "description": f"{type_tissu or ''} - {couleur or ''}".strip(),
                "modele_id": modele_id,
                "gamme_tissu": _cell(row, 1),
                "type_tissu": type_tissu,
                "couleur": couleur,
                "housse_amovible": _is_true(row[5] if len(row) > 5 else None),
                "statut_collection": _cell(row, 6),
                "categorie": self.category,
                "actif": True,
            }
            self._upsert(record, on_conflict="reference,modele_id")

    def import_generic(self, rows: List[Sequence[Any]]) -> None:
        for row in rows:
            nom = _cell(row, 0)
            reference = _cell(row, 1)
            if not nom or not reference:
                continue
            record = {
                "nom": nom,
                "reference": reference,
                "description": _cell(row, 2),
                "categorie": self.category,
                "actif": True,
            }
            self._upsert(record, on_conflict="reference")

    def archive_unprocessed(self) -> None:
        if not self.processed_ids:
            return
        try:
            self.summary.archived = archive_missing(
                self._client, self.category, self.processed_ids
            )
        except PROVIDER_ERRORS as exc:
            logger.error("Archiving of %s products failed: %s", self.category, exc)

    def run(self, rows: List[Sequence[Any]], archive: bool) -> CatalogImportSummary:
        if is_sample_category(self.category):
            self.import_samples(rows)
        else:
            self.import_generic(rows)
        if archive:
            self.archive_unprocessed()
        return self.summary


async def import_catalog(
    client_factory: AdminClientFactory,
    content: Optional[bytes],
    *,
    category: Optional[str] = None,
    archive_missing_products: bool = False,
) -> CatalogImportSummary:
    if not content:
        raise InvalidRequest("Aucun fichier fourni")
    rows = await asyncio.to_thread(read_rows, content)
    job = CatalogImport(client_factory(), category or DEFAULT_CATEGORY)
    summary = await asyncio.to_thread(job.run, rows, archive_missing_products)
    logger.info(
        "Catalog import %s: %s rows, %s products, %s errors, %s archived",
        job.category,
        len(rows),
        summary.produits,
        summary.erreurs,
        summary.archived,
    )
    return summary
