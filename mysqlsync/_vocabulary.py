"""Fixed vocabularies used by the substitution anonymizers.

Order matters: an input is mapped to ``vocabulary[hash % len(vocabulary)]``,
so reordering or editing these tuples changes every pseudonym.  Duplicates
are dropped at import time, keeping the first occurrence.
"""

from typing import Iterable, Tuple


def _unique(words: Iterable[str]) -> Tuple[str, ...]:
    return tuple(dict.fromkeys(words))


FIRST_NAMES = _unique((
    "Robbie", "Gisele", "Emmaline", "Tess", "Jestine", "Ligia", "Veronika",
    "Chris", "Nohemi", "Latina", "Inge", "Steffanie", "Remedios", "Yajaira",
    "Miguelina", "Grover", "Shelli", "Maribel", "Raguel", "Alvaro", "Kristeen",
    "Amparo", "Long", "Darell", "Bell", "Alica", "Lue", "Lynnette", "Alberta",
    "Alice", "Myrta", "Luanna", "Lakeesha", "Rafael", "Eleni", "Joellen",
    "Margert", "Dean", "Tammy", "Dan", "Caren", "Antonina", "Helena",
    "Marcellus", "Gussie", "Cecil", "Earlie", "Felicia", "Stacy", "Ines",
    "Lani", "Gaye", "Kerri", "Mardell", "Shanel", "Rocky", "Christena",
    "Ciera", "Margarete", "Normand", "Keira", "Rosalina", "Chuck", "Amada",
    "Lawerence", "Ava", "Tracey", "Luana", "Kacie", "Elouise", "Ileana",
    "Lanie", "Althea", "Evelia", "Emerita", "Samuel", "Beulah", "Portia",
    "Chet", "Aiko", "Freddy", "Abigail", "Ella", "Jerri", "Erline", "Gary",
    "Faye", "Dorthea", "Joselyn", "Lemuel", "Zane", "Florence", "Winford",
    "Kaci", "Candis", "Noble", "Dorothy", "Tresa", "Alvina", "Gretta", "Pedro",
    "Princess", "Alyse", "Vernetta", "Deadra", "Rosamond", "Vanesa", "Rossana",
    "Alyce", "Han", "Shauna", "Buddy", "Herma", "Keren", "Clemente", "Alda",
    "Le", "Jordon", "Tana", "Liana", "Jeane", "Moises", "Yanira", "Daniella",
    "Lanora", "Lynwood", "Vernon", "Marketta", "Faviola", "Bart", "Rosella",
    "Ammie", "Hyo", "Mariko", "Celsa", "Jaimie", "Cathleen", "Jodee", "Gwen",
    "Charlena", "Elmo", "Derick", "Juliana", "Tyesha", "Raphael", "Dannette",
    "Bronwyn", "Rodrigo", "Adena", "Carolyn", "Dia", "Chae", "Olivia",
    "Silvia", "Valentin", "Kindra", "Stefanie", "Tressie", "Marsha", "Chanell",
    "Magdalena", "Benita", "Ione", "Sondra", "Herman", "Kevin", "Verena",
    "Odessa", "Alberto", "Tyler", "Del", "Fiona", "Jacque", "Dovie", "Jacki",
    "Shira", "Domingo", "Ty", "Jeffry", "Ester", "Bianca", "Kimberlee",
    "Diann", "Rolande", "Manie", "Lovetta", "Shyla", "Eleonore", "Imelda",
    "Debbra", "Lyndia", "Maryrose", "Christine", "Missy", "Sana", "Shizue",
    "Patricia", "Sharonda",
))

LAST_NAMES = _unique((
    "Mcclure", "Jarvis", "Kane", "Burke", "Olsen", "Stuart", "Terry", "Meza",
    "Medina", "Cooper", "Wise", "Mullins", "Gregory", "Lozano", "Scott",
    "Parsons", "Goodwin", "Leonard", "Cummings", "Morgan", "Melton", "Nguyen",
    "Galloway", "Nicholson", "Aguilar", "Tapia", "Norris", "Ford", "Mcconnell",
    "Lopez", "Walls", "Oneal", "Daniel", "Meyers", "Valenzuela", "Rangel",
    "Kelley", "Walton", "Carlson", "Johns", "Watts", "Webb", "Dodson",
    "Spears", "Herman", "Solomon", "Simon", "Briggs", "Maxwell", "Donovan",
    "Rodgers", "Bush", "Griffin", "Fry", "Lee", "Copeland", "Fitzgerald",
    "Valentine", "Carpenter", "Foster", "Ashley", "Randall", "Ibarra", "Clark",
    "Humphrey", "Hendrix", "Cordova", "Wilson", "Snyder", "Roman", "Brown",
    "Hooper", "Weber", "Coffey", "Stanley", "Vasquez", "Wu", "Howe", "Page",
    "Gordon", "Erickson", "Thompson", "Walsh", "Barrera", "Pollard",
    "Sandoval", "Tucker", "Benson", "Lara", "Barry", "Delacruz", "Hays",
    "Mathews", "Bernard", "Norton", "Landry", "Hurley", "Howell", "Carson",
    "Casey", "Saunders", "Farley", "Woodward", "Beltran", "Gill", "Levy",
    "Stafford", "Lamb", "Benitez", "Caldwell", "Kelly", "Rosario", "Petty",
    "Dyer", "Gray", "Leblanc", "Bautista", "Olson", "Carrillo", "Odom",
    "Randolph", "Sharp", "Esparza", "Harris", "Romero", "Hester", "Winters",
    "Shaw", "Michael", "Ingram", "Gentry", "Wong", "Pearson", "Conway",
    "Reyes", "Bender", "Doyle", "Hodges", "Vaughn", "Lynn", "Willis",
    "Shepard", "Hendricks", "Calderon", "Wiggins", "Mcdaniel", "Shepherd",
    "Vincent", "Salinas", "Joseph",
))

CITIES = _unique((
    "Landfall", "Braxton", "Fanwood", "Celebration", "Mounds View",
    "Cedar Creek", "Rhome", "Veteran", "Nowthen", "Halchita", "Micro", "Lund",
    "Oak Grove Heights", "Soda Bay", "Wendell", "Hydesville", "Prentice",
    "Lake Wissota", "Dalhart", "East Hodge", "Jacksonville Beach", "Maytown",
    "Ammon", "Gainesville", "Fort Mohave", "Crown Point", "Stantonville",
    "Port Orchard", "Tanacross", "Bell Arthur", "Daviston", "Fort Belvoir",
    "Neibert", "Pilgrim", "Grant", "Vann Crossroads", "City of the Sun",
    "South Coffeyville", "South Milwaukee", "Stuttgart", "Spring Mount",
    "Deatsville", "East Fork", "Waialua", "Burnt Ranch", "Hitchita", "Ruch",
    "Audubon", "Oxnard", "East Avon", "Kibler", "Paoli", "Elysian", "Oriental",
    "Zellwood", "Long Prairie", "White Mountain", "Copake Lake",
    "Arden on the Severn", "White Meadow Lake", "Narciso Pena", "Persia",
    "Ponderosa Pines", "Carlyss", "Sunrise Beach Village", "Kouts",
    "Williamsburg", "Max Meadows", "Whispering Pines", "Stratmoor",
    "Newfield Hamlet", "Knobel", "Mallard", "Gore", "Hayfield", "Roxboro",
    "Leawood", "Clear Lake Shores", "Linglestown", "Minor", "Finn Hill",
    "Aulander", "Bonadelle Ranchos", "Arcadia", "Pope-Vannoy Landing",
    "Wayne Heights", "Byersville", "Lockhart", "Larwill", "Magnet", "Staunton",
    "Garden Farms", "Lynnwood", "Stoneham", "Condon", "Sands Point",
    "Cokeville", "McNeal", "Wilkesboro", "Boothville",
))

STREETS = _unique((
    "Fawn Court", "Main Street South", "Old York Road", "Rosewood Drive",
    "2nd Street North", "Orange Street", "6th Avenue", "Bridle Lane",
    "Shady Lane", "Warren Avenue", "Cross Street", "Woodland Avenue",
    "Myrtle Avenue", "Cambridge Court", "6th Street", "Dogwood Lane",
    "Route 64", "Hamilton Street", "4th Street West", "Lexington Drive",
    "Arch Street", "Heather Lane", "Meadow Lane", "4th Avenue", "Laurel Drive",
    "Sheffield Drive", "Route 30", "Front Street North", "Oak Lane",
    "Windsor Court", "Route 10", "Grand Avenue", "5th Street", "Jones Street",
    "Lincoln Street", "Hillside Drive", "James Street", "Center Street",
    "Ivy Lane", "13th Street", "Route 20", "Beech Street", "Virginia Avenue",
    "Manor Drive", "Pennsylvania Avenue", "Cleveland Avenue", "Cedar Court",
    "Pine Street", "River Road", "Devon Road", "Woodland Drive",
    "Sunset Drive", "Cherry Lane", "Canterbury Drive", "Franklin Avenue",
    "Country Lane", "Ann Street", "Lilac Lane", "Liberty Street",
    "Cobblestone Court", "8th Avenue", "Orchard Street", "Devonshire Drive",
    "Meadow Street", "Willow Street", "Bridle Court", "Cambridge Road",
    "Lexington Court", "Creek Road", "Pheasant Run", "Canal Street",
    "Lakeview Drive", "5th Street West", "West Avenue", "Summit Street",
    "Chestnut Street", "Jefferson Avenue", "Andover Court", "College Avenue",
    "Orchard Lane", "4th Street North", "Spruce Street", "Grove Street",
    "School Street", "Cleveland Street", "Lake Street", "Forest Drive",
    "Canterbury Road", "Evergreen Lane", "Walnut Avenue", "Railroad Avenue",
    "Circle Drive", "Route 4", "Sycamore Drive", "5th Street East",
    "Parker Street", "Morris Street", "Cedar Street", "Devon Court",
    "Prospect Street", "Pearl Street", "Summer Street", "Canterbury Court",
    "Hawthorne Lane", "Hickory Street", "Ridge Road", "Hanover Court",
    "Colonial Drive", "Linda Lane", "Briarwood Drive", "Sycamore Street",
    "Washington Street", "Glenwood Avenue", "Aspen Court", "Mulberry Lane",
    "Augusta Drive", "Arlington Avenue", "Front Street South",
    "Franklin Court", "Belmont Avenue", "Monroe Drive", "Harrison Street",
    "Prospect Avenue", "Madison Court", "South Street", "John Street",
    "Country Club Drive", "Hillcrest Drive", "Valley View Road",
    "Hamilton Road", "Tanglewood Drive", "Buttonwood Drive", "Adams Avenue",
    "Riverside Drive", "Homestead Drive", "Eagle Road", "Route 7",
    "West Street", "Lantern Lane", "Elizabeth Street", "Bank Street",
    "Forest Avenue", "Cardinal Drive", "Route 70", "Main Street East",
    "8th Street", "Chestnut Avenue", "Madison Avenue", "Smith Street",
    "Brookside Drive",
))

STREET_NUMBERS = tuple(str(i) for i in range(1, 180))
