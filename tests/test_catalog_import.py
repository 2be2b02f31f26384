from io import BytesIO

from openpyxl import Workbook

from conftest import api_error

SAMPLE_HEADER = [
    "Modèle",
    "Gamme tissu",
    "Référence",
    "Type tissu",
    "Couleur",
    "Housse amovible",
    "Statut collection",
]


def _xlsx(rows):
    wb = Workbook()
    ws = wb.active
    for row in rows:
        ws.append(row)
    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def _post(client, content, **form):
    return client.post(
        "/api/admin/catalog/import",
        files={"file": ("catalogue.xlsx", content, "application/vnd.ms-excel")},
        data=form,
    )


def test_sample_import_creates_models_once(client, db):
    content = _xlsx(
        [
            SAMPLE_HEADER,
            ["Oslo", "Premium", "REF-1", "Velours", "Bleu", "VRAI", "Actif"],
            ["Oslo", "Premium", "REF-2", "Lin", "Beige", False, "Actif"],
            [None, None, None, None, None, None, None],
            ["Bergen", "Standard", "REF-3", "Coton", "Gris", "TRUE", "Nouveau"],
        ]
    )

    response = _post(client, content)

    assert response.status_code == 200, response.text
    assert response.json() == {
        "message": "Import terminé",
        "summary": {"modeles": 2, "produits": 3, "archived": 0, "erreurs": 0},
    }
    produits = {row["reference"]: row for row in db.tables["produits"]}
    assert produits["REF-1"]["nom"] == "Oslo - REF-1"
    assert produits["REF-1"]["description"] == "Velours - Bleu"
    assert produits["REF-1"]["housse_amovible"] is True
    assert produits["REF-2"]["housse_amovible"] is False
    assert produits["REF-3"]["categorie"] == "echantillon_lri"


def test_existing_model_is_reused(client, db):
    db.add_row("modeles", {"id": "mod-oslo", "nom": "Oslo"})
    content = _xlsx([SAMPLE_HEADER, ["Oslo", "Premium", "REF-1", "Velours", "Bleu", "", ""]])

    response = _post(client, content)

    assert response.json()["summary"]["modeles"] == 0
    assert db.tables["produits"][0]["modele_id"] == "mod-oslo"


def test_generic_category_skips_incomplete_rows(client, db):
    content = _xlsx(
        [
            ["Nom", "Référence", "Description"],
            ["Pente PVC", "PEN-01", "Pente 45°"],
            ["Sans référence", None, "ignorée"],
        ]
    )

    response = _post(client, content, category="consommable")

    assert response.json()["summary"] == {"modeles": 0, "produits": 1, "archived": 0, "erreurs": 0}
    assert db.tables["produits"][0]["categorie"] == "consommable"


def test_archive_missing_only_touches_unprocessed(client, db):
    db.add_row("produits", {"id": "old", "reference": "OLD-1", "categorie": "consommable", "actif": True})
    db.add_row("produits", {"id": "other", "reference": "X-1", "categorie": "pente", "actif": True})
    content = _xlsx([["Nom", "Référence", "Description"], ["Pente PVC", "PEN-01", ""]])

    response = _post(client, content, category="consommable", archiveMissing="true")

    assert response.json()["summary"]["archived"] == 1
    by_id = {row["id"]: row for row in db.tables["produits"]}
    assert by_id["old"]["actif"] is False
    assert by_id["other"]["actif"] is True


def test_row_errors_are_counted(client, db):
    db.fail("produits", "upsert", api_error("null value in column"))
    content = _xlsx([["Nom", "Référence", "Description"], ["Pente PVC", "PEN-01", ""]])

    response = _post(client, content, category="consommable")

    assert response.status_code == 200
    assert response.json()["summary"]["erreurs"] == 1


def test_missing_file_is_400(client):
    response = client.post("/api/admin/catalog/import", data={"category": "consommable"})

    assert response.status_code == 400
    assert response.json()["error"] == "Aucun fichier fourni"


def test_unreadable_file_is_400(client):
    response = _post(client, b"definitely not a workbook")

    assert response.status_code == 400
    assert response.json()["error"] == "Fichier Excel illisible"
