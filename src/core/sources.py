"""Built-in AcademicWorks portal list used when settings name no sources."""

from src.core.schemas import Source

# (id, display name, subdomain)
_PORTALS: tuple[tuple[str, str, str], ...] = (
    ("umich", "UMich", "umich"),
    ("osu", "Ohio State", "osu"),
    ("psu", "Penn State", "psu"),
    ("ufl", "Florida", "ufl"),
    ("utexas", "UT Austin", "utexas"),
    ("wisc", "Wisconsin", "wisc"),
    ("umn", "Minnesota", "umn"),
    ("purdue", "Purdue", "purdue"),
    ("uga", "Georgia", "uga"),
    ("umd", "Maryland", "umd"),
    ("ucf", "UCF", "ucf"),
    ("depaul", "DePaul", "depaul"),
    ("fiu", "FIU", "fiu"),
    ("clc", "College of Lake County", "clcillinois"),
    ("slu", "Saint Louis University", "slu"),
    ("uccs", "UCCS", "uccs"),
    ("uwm", "UW-Milwaukee", "uwm"),
    ("csuchico", "Chico State", "csuchico"),
    ("utsa", "UTSA", "utsa"),
    ("utah", "Utah", "utah"),
    ("usu", "Utah State", "usu"),
    ("humboldt", "Cal Poly Humboldt", "humboldt"),
    ("csusb", "CSU San Bernardino", "csusb"),
    ("csulb", "CSU Long Beach", "csulb"),
    ("csun", "CSU Northridge", "csun"),
    ("csuci", "CSU Channel Islands", "csuci"),
    ("cpp", "Cal Poly Pomona", "cpp"),
    ("fullerton", "CSU Fullerton", "fullerton"),
    ("csus", "Sacramento State", "csus"),
    ("towson", "Towson", "towson"),
    ("umass", "UMass", "umass"),
    ("sfsu", "San Francisco State", "sfsu"),
    ("buffalo", "Buffalo", "buffalo"),
    ("uky", "Kentucky", "uky"),
    ("bgsu", "Bowling Green", "bgsu"),
    ("csuohio", "Cleveland State", "csuohio"),
    ("asu", "Arizona State", "asu"),
    ("uoregon", "Oregon", "uoregon"),
    ("rutgers", "Rutgers", "rutgers"),
    ("temple", "Temple", "temple"),
    ("uconn", "UConn", "uconn"),
    ("vt", "Virginia Tech", "vt"),
    ("ncsu", "NC State", "ncsu"),
    ("clemson", "Clemson", "clemson"),
    ("usf", "South Florida", "usf"),
    ("fsu", "Florida State", "fsu"),
    ("ua", "Alabama", "ua"),
    ("auburn", "Auburn", "auburn"),
    ("lsu", "LSU", "lsu"),
    ("tamu", "Texas A&M", "tamu"),
    ("uh", "Houston", "uh"),
    ("ou", "Oklahoma", "ou"),
    ("ku", "Kansas", "ku"),
    ("mizzou", "Missouri", "mizzou"),
    ("iowa", "Iowa", "iowa"),
    ("isu", "Iowa State", "isu"),
    ("msu", "Michigan State", "msu"),
    ("indiana", "Indiana", "indiana"),
    ("northwestern", "Northwestern", "northwestern"),
    ("uic", "UIC", "uic"),
)


def default_sources() -> list[Source]:
    """Return a fresh list of the built-in portals."""
    return [
        Source(
            id=source_id,
            display_name=name,
            base_url=f"https://{subdomain}.academicworks.com",
        )
        for source_id, name, subdomain in _PORTALS
    ]
