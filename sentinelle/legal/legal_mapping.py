"""
Diccionario de mapeo jurídico entre tipos de incidente y artículos del derecho
suizo de protección del adulto.

Este módulo contiene únicamente datos estáticos (no lógica).

CONTROL DE CALIDAD:
- ARTICLE_CATALOG es la tabla estática de respaldo del resolvedor: se usa
  cuando el servicio de explicaciones no responde.
- Los textos son resúmenes (no citas literales); `source` indica la fuente
  oficial a consultar.
"""

FEDLEX_CC = "https://www.fedlex.admin.ch/eli/cc/24/233_245_233/fr"
FEDLEX_CST = "https://www.fedlex.admin.ch/eli/cc/1999/404/fr"
FEDLEX_PA = "https://www.fedlex.admin.ch/eli/cc/1969/737_757_755/fr"
FEDLEX_LPD = "https://www.fedlex.admin.ch/eli/cc/2022/491/fr"
FEDLEX_CP = "https://www.fedlex.admin.ch/eli/cc/54/757_781_799/fr"

# Bases legales por tipo de incidente (orden = relevancia)
INCIDENT_TYPE_LEGAL_MAP = {
    "Délai non respecté": [
        {"code": "CC", "article": "406"},
        {"code": "CC", "article": "404"},
        {"code": "CC", "article": "405"},
        {"code": "Cst", "article": "29"},
        {"code": "PA", "article": "29"},
        {"code": "LPPA-VD", "article": "42"},
    ],
    "Non-réponse": [
        {"code": "CC", "article": "406"},
        {"code": "CC", "article": "413"},
        {"code": "PA", "article": "26"},
        {"code": "PA", "article": "29"},
        {"code": "Cst", "article": "29"},
        {"code": "LPD", "article": "25"},
    ],
    "Décision contestable": [
        {"code": "PA", "article": "35"},
        {"code": "Cst", "article": "29"},
        {"code": "CC", "article": "450"},
        {"code": "CC", "article": "450a"},
        {"code": "CC", "article": "450b"},
        {"code": "CC", "article": "450c"},
        {"code": "PA", "article": "26"},
    ],
    "Défaut d'information": [
        {"code": "CC", "article": "406"},
        {"code": "CC", "article": "413"},
        {"code": "CC", "article": "414"},
        {"code": "LPD", "article": "25"},
        {"code": "LPD", "article": "6"},
        {"code": "PA", "article": "26"},
        {"code": "Cst", "article": "29"},
    ],
    "Violation procédurale": [
        {"code": "Cst", "article": "29"},
        {"code": "PA", "article": "26"},
        {"code": "PA", "article": "29"},
        {"code": "PA", "article": "35"},
        {"code": "CC", "article": "447"},
        {"code": "CC", "article": "446"},
        {"code": "CC", "article": "448"},
    ],
    "Abus de pouvoir": [
        {"code": "CC", "article": "420"},
        {"code": "CC", "article": "421"},
        {"code": "CC", "article": "422"},
        {"code": "Cst", "article": "10"},
        {"code": "Cst", "article": "13"},
        {"code": "CC", "article": "450"},
        {"code": "CC", "article": "389"},
    ],
    "Négligence": [
        {"code": "CC", "article": "406"},
        {"code": "CC", "article": "420"},
        {"code": "CC", "article": "404"},
        {"code": "CC", "article": "405"},
        {"code": "CC", "article": "413"},
        {"code": "CC", "article": "414"},
    ],
    "Gestion patrimoniale": [
        {"code": "CC", "article": "408"},
        {"code": "CC", "article": "409"},
        {"code": "CC", "article": "410"},
        {"code": "CC", "article": "411"},
        {"code": "CC", "article": "412"},
        {"code": "CC", "article": "413"},
        {"code": "CC", "article": "420"},
    ],
    "Placement contesté": [
        {"code": "CC", "article": "426"},
        {"code": "CC", "article": "427"},
        {"code": "CC", "article": "428"},
        {"code": "CC", "article": "429"},
        {"code": "CC", "article": "430"},
        {"code": "CC", "article": "431"},
        {"code": "CC", "article": "439"},
        {"code": "Cst", "article": "10"},
        {"code": "Cst", "article": "31"},
    ],
    "Violation confidentialité": [
        {"code": "LPD", "article": "6"},
        {"code": "LPD", "article": "7"},
        {"code": "LPD", "article": "13"},
        {"code": "LPD", "article": "25"},
        {"code": "Cst", "article": "13"},
        {"code": "CP", "article": "321"},
    ],
    "Défaut de consentement": [
        {"code": "CC", "article": "377"},
        {"code": "CC", "article": "378"},
        {"code": "CC", "article": "394"},
        {"code": "CC", "article": "421"},
        {"code": "Cst", "article": "10"},
        {"code": "Cst", "article": "13"},
    ],
}

# Fallback genérico para tipos no mapeados
GENERIC_LEGAL_BASES = [
    {"code": "CC", "article": "406"},
    {"code": "Cst", "article": "29"},
]

# Detección por palabras clave (faits + dysfonctionnement)
KEYWORD_LEGAL_MAP = [
    {
        "keywords": ["délai", "retard", "attente", "jours", "semaines", "mois"],
        "refs": [("CC", "406"), ("Cst", "29"), ("PA", "29")],
    },
    {
        "keywords": ["réponse", "silence", "ignor", "sans suite"],
        "refs": [("CC", "406"), ("PA", "26"), ("Cst", "29")],
    },
    {
        "keywords": ["décision", "refus", "rejet", "motiv"],
        "refs": [("PA", "35"), ("CC", "450"), ("Cst", "29")],
    },
    {
        "keywords": ["information", "document", "accès", "consulter"],
        "refs": [("LPD", "25"), ("PA", "26"), ("CC", "413")],
    },
    {
        "keywords": ["argent", "compte", "finance", "paiement", "facture"],
        "refs": [("CC", "408"), ("CC", "413"), ("CC", "420")],
    },
    {
        "keywords": ["placement", "pafa", "clinique", "hôpital", "internement"],
        "refs": [("CC", "426"), ("CC", "439"), ("Cst", "10")],
    },
    {
        "keywords": ["recours", "appel", "contester"],
        "refs": [("CC", "450"), ("CC", "450a"), ("CC", "450b")],
    },
    {
        "keywords": ["confidenti", "secret", "privé", "donnée"],
        "refs": [("LPD", "6"), ("LPD", "13"), ("Cst", "13")],
    },
    {
        "keywords": ["curateur", "curatrice", "curatelle"],
        "refs": [("CC", "404"), ("CC", "405"), ("CC", "406")],
    },
    {
        "keywords": ["négligen", "faute", "erreur", "manquement"],
        "refs": [("CC", "420"), ("CC", "406")],
    },
    {
        "keywords": ["vacances", "absent", "indisponible", "congé"],
        "refs": [("CC", "406"), ("CC", "403")],
    },
    {
        "keywords": ["promesse", "engagement", "prévu"],
        "refs": [("CC", "3"), ("CC", "406")],
    },
]

# Catálogo estático de artículos (clave: "CODE ARTICLE")
ARTICLE_CATALOG = {
    "CC 3": {
        "title": "Bonne foi",
        "summary": "La bonne foi est présumée lorsque la loi en fait dépendre la naissance ou les effets d'un droit.",
        "source": FEDLEX_CC,
    },
    "CC 377": {
        "title": "Plan de traitement",
        "summary": "Le médecin établit le traitement avec la personne habilitée à représenter la personne incapable de discernement et l'informe de manière appropriée.",
        "source": FEDLEX_CC,
    },
    "CC 378": {
        "title": "Représentation dans le domaine médical",
        "summary": "Désigne, dans l'ordre légal, les personnes habilitées à consentir à un traitement médical au nom de la personne incapable de discernement.",
        "source": FEDLEX_CC,
    },
    "CC 388": {
        "title": "But de la protection de l'adulte",
        "summary": "Les mesures de protection garantissent l'assistance et la protection de la personne qui a besoin d'aide, en préservant autant que possible son autonomie.",
        "source": FEDLEX_CC,
    },
    "CC 389": {
        "title": "Subsidiarité et proportionnalité",
        "summary": "L'autorité n'ordonne une mesure que si l'appui de la famille ou d'autres services ne suffit pas; la mesure doit être nécessaire et appropriée.",
        "source": FEDLEX_CC,
    },
    "CC 390": {
        "title": "Conditions de la curatelle",
        "summary": "Une curatelle est instituée lorsqu'une personne majeure est partiellement ou totalement empêchée d'assurer elle-même la sauvegarde de ses intérêts.",
        "source": FEDLEX_CC,
    },
    "CC 394": {
        "title": "Curatelle de coopération",
        "summary": "Certains actes de la personne concernée sont soumis au consentement du curateur afin de la protéger.",
        "source": FEDLEX_CC,
    },
    "CC 403": {
        "title": "Empêchement et conflit d'intérêts",
        "summary": "En cas d'empêchement du curateur, l'autorité de protection nomme un substitut ou règle elle-même l'affaire.",
        "source": FEDLEX_CC,
    },
    "CC 404": {
        "title": "Rémunération et dépenses du curateur",
        "summary": "Le curateur a droit à une rémunération appropriée et au remboursement des frais justifiés, fixés par l'autorité de protection.",
        "source": FEDLEX_CC,
    },
    "CC 405": {
        "title": "Entrée en fonction",
        "summary": "Le curateur réunit les informations nécessaires à l'accomplissement de ses tâches et prend personnellement contact avec la personne concernée.",
        "source": FEDLEX_CC,
    },
    "CC 406": {
        "title": "Relations avec la personne concernée",
        "summary": "Le curateur sauvegarde les intérêts de la personne concernée, tient compte de son avis et s'efforce d'établir une relation de confiance.",
        "source": FEDLEX_CC,
    },
    "CC 408": {
        "title": "Gestion du patrimoine",
        "summary": "Le curateur chargé de la gestion administre les biens avec diligence et effectue les actes juridiques liés à la gestion.",
        "source": FEDLEX_CC,
    },
    "CC 409": {
        "title": "Montants à disposition",
        "summary": "Le curateur met à la disposition de la personne concernée des montants appropriés prélevés sur ses biens.",
        "source": FEDLEX_CC,
    },
    "CC 410": {
        "title": "Comptes",
        "summary": "Le curateur tient les comptes et les soumet à l'approbation de l'autorité de protection aux périodes fixées par celle-ci.",
        "source": FEDLEX_CC,
    },
    "CC 411": {
        "title": "Rapport",
        "summary": "Le curateur remet à l'autorité de protection, aussi souvent que nécessaire, un rapport sur la situation de la personne concernée.",
        "source": FEDLEX_CC,
    },
    "CC 412": {
        "title": "Actes particuliers",
        "summary": "Certains actes, comme les cautionnements ou les fondations, sont interdits au curateur au nom de la personne concernée.",
        "source": FEDLEX_CC,
    },
    "CC 413": {
        "title": "Devoir de diligence et de discrétion",
        "summary": "Le curateur accomplit ses tâches avec la même diligence qu'un mandataire et est tenu au devoir de discrétion.",
        "source": FEDLEX_CC,
    },
    "CC 414": {
        "title": "Changements de circonstances",
        "summary": "Le curateur informe sans délai l'autorité de protection des faits qui pourraient justifier la modification ou la levée de la mesure.",
        "source": FEDLEX_CC,
    },
    "CC 419": {
        "title": "Appel à l'autorité de protection",
        "summary": "La personne concernée ou tout intéressé peut en appeler à l'autorité de protection contre les actes ou omissions du curateur.",
        "source": FEDLEX_CC,
    },
    "CC 420": {
        "title": "Dispense de certaines obligations",
        "summary": "L'autorité peut dispenser les proches nommés curateurs de certaines obligations, notamment d'établir un inventaire ou des comptes.",
        "source": FEDLEX_CC,
    },
    "CC 421": {
        "title": "Fin des fonctions de plein droit",
        "summary": "Les fonctions du curateur prennent fin à l'échéance fixée, à la levée de la mesure ou à la fin des rapports de travail.",
        "source": FEDLEX_CC,
    },
    "CC 422": {
        "title": "Libération",
        "summary": "Le curateur peut demander à être libéré de ses fonctions au plus tôt après quatre ans, ou avant pour de justes motifs.",
        "source": FEDLEX_CC,
    },
    "CC 426": {
        "title": "Placement à des fins d'assistance",
        "summary": "Une personne peut être placée dans une institution appropriée lorsque l'assistance ou le traitement nécessaires ne peuvent lui être fournis autrement.",
        "source": FEDLEX_CC,
    },
    "CC 427": {
        "title": "Maintien d'une personne entrée de son plein gré",
        "summary": "Une personne entrée volontairement peut être retenue au plus trois jours si elle met en danger sa vie ou celle d'autrui.",
        "source": FEDLEX_CC,
    },
    "CC 428": {
        "title": "Compétence de l'autorité de protection",
        "summary": "L'autorité de protection est compétente pour ordonner le placement et la libération.",
        "source": FEDLEX_CC,
    },
    "CC 429": {
        "title": "Compétence des médecins",
        "summary": "Les cantons peuvent désigner des médecins habilités à ordonner un placement pour une durée limitée.",
        "source": FEDLEX_CC,
    },
    "CC 430": {
        "title": "Procédure du placement médical",
        "summary": "Le médecin examine lui-même la personne concernée et l'entend; la décision indique notamment les motifs du placement.",
        "source": FEDLEX_CC,
    },
    "CC 431": {
        "title": "Examen périodique",
        "summary": "L'autorité de protection examine périodiquement si les conditions du maintien du placement sont encore remplies.",
        "source": FEDLEX_CC,
    },
    "CC 439": {
        "title": "Appel au juge",
        "summary": "La personne concernée ou un proche peut en appeler par écrit au juge contre certaines décisions liées au placement.",
        "source": FEDLEX_CC,
    },
    "CC 446": {
        "title": "Maximes de procédure",
        "summary": "L'autorité de protection établit les faits d'office et applique le droit d'office.",
        "source": FEDLEX_CC,
    },
    "CC 447": {
        "title": "Droit d'être entendu",
        "summary": "La personne concernée est entendue personnellement, à moins que cela ne paraisse disproportionné.",
        "source": FEDLEX_CC,
    },
    "CC 448": {
        "title": "Obligation de collaborer",
        "summary": "Les personnes parties à la procédure et les tiers sont tenus de collaborer à l'établissement des faits.",
        "source": FEDLEX_CC,
    },
    "CC 450": {
        "title": "Recours",
        "summary": "Les décisions de l'autorité de protection peuvent faire l'objet d'un recours devant le juge compétent.",
        "source": FEDLEX_CC,
    },
    "CC 450a": {
        "title": "Motifs du recours",
        "summary": "Le recours peut être formé pour violation du droit, constatation inexacte des faits ou inopportunité; il est aussi ouvert pour déni de justice ou retard injustifié.",
        "source": FEDLEX_CC,
    },
    "CC 450b": {
        "title": "Délai de recours",
        "summary": "Le délai de recours est de trente jours à compter de la notification de la décision.",
        "source": FEDLEX_CC,
    },
    "CC 450c": {
        "title": "Effet suspensif",
        "summary": "Le recours est suspensif, sauf si l'autorité de protection ou l'instance de recours en décide autrement.",
        "source": FEDLEX_CC,
    },
    "Cst 10": {
        "title": "Droit à la vie et liberté personnelle",
        "summary": "Tout être humain a droit à la liberté personnelle, notamment à l'intégrité physique et psychique et à la liberté de mouvement.",
        "source": FEDLEX_CST,
    },
    "Cst 13": {
        "title": "Protection de la sphère privée",
        "summary": "Toute personne a droit au respect de sa vie privée et familiale et à être protégée contre l'emploi abusif de ses données.",
        "source": FEDLEX_CST,
    },
    "Cst 29": {
        "title": "Garanties générales de procédure",
        "summary": "Toute personne a droit à ce que sa cause soit traitée équitablement et jugée dans un délai raisonnable; les parties ont le droit d'être entendues.",
        "source": FEDLEX_CST,
    },
    "Cst 31": {
        "title": "Privation de liberté",
        "summary": "Nul ne peut être privé de sa liberté si ce n'est dans les cas prévus par la loi et selon les formes qu'elle prescrit.",
        "source": FEDLEX_CST,
    },
    "PA 26": {
        "title": "Consultation des pièces",
        "summary": "La partie ou son mandataire a le droit de consulter les pièces du dossier qui la concernent.",
        "source": FEDLEX_PA,
    },
    "PA 29": {
        "title": "Droit d'être entendu",
        "summary": "Les parties ont le droit d'être entendues avant qu'une décision ne soit prise.",
        "source": FEDLEX_PA,
    },
    "PA 35": {
        "title": "Motivation des décisions",
        "summary": "Les décisions écrites sont désignées comme telles, motivées et indiquent les voies de droit.",
        "source": FEDLEX_PA,
    },
    "LPD 6": {
        "title": "Principes du traitement",
        "summary": "Tout traitement de données personnelles doit être licite, conforme à la bonne foi, proportionné et reconnaissable pour la personne concernée.",
        "source": FEDLEX_LPD,
    },
    "LPD 7": {
        "title": "Protection des données dès la conception",
        "summary": "Le responsable du traitement met en place des mesures techniques et organisationnelles appropriées.",
        "source": FEDLEX_LPD,
    },
    "LPD 25": {
        "title": "Droit d'accès",
        "summary": "Toute personne peut demander au responsable du traitement si des données la concernant sont traitées et en obtenir communication.",
        "source": FEDLEX_LPD,
    },
    "CP 321": {
        "title": "Violation du secret professionnel",
        "summary": "Réprime la révélation d'un secret confié en vertu d'une profession soumise au secret.",
        "source": FEDLEX_CP,
    },
}

# Texto por defecto cuando un artículo no está en el catálogo
UNVERIFIED_CAPTION = "Base légale - voir la référence citée"
