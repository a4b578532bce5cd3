import pytest

from vehicle_registrations.data.loader import DatasetLoader, RegistrationDataset

HEADER = (
    "Make,Model,Variant,Count,Fuel,CC,Class,Month,Year,"
    "RTO Code,RTO Name,City,District,State Code,State"
)

PUNE = "MH12,PUNE RTO,PUNE,PUNE,MH,MAHARASHTRA"
MANGALORE = "KA19,MANGALORE RTO,MANGALURU,DAKSHINA KANNADA,KA,KARNATAKA"
HOSUR = "TN70,HOSUR RTO,HOSUR,KRISHNAGIRI,TN,TAMIL NADU"


def _month_text(month, hero, honda, ather, extra=()):
    rows = [
        HEADER,
        f"HERO,SPLENDOR,STD,{hero},PETROL,100,MOTOR CYCLE,{month},2025,{PUNE}",
        f"HONDA,ACTIVA,DLX,{honda},PETROL,110,SCOOTER,{month},2025,{MANGALORE}",
        f'ATHER,450X,"PRO, PLUS",{ather},ELECTRIC,NA,SCOOTER,{month},2025,{HOSUR}',
        *extra,
    ]
    return "\n".join(rows) + "\n"


@pytest.fixture
def month_texts():
    """
    Three months of extracts:
        HERO     100 / 150 / 200   (Metro)
        HONDA     50 /  60 /  70   (Urban)
        ATHER     20 /  30 /  40   (Rural)
        TINYMOTO   - /   - /   1   (Rural, below 0.5% share)
    Grand total 721. Month 4 also carries a blank and a short row.
    """
    return {
        4: _month_text(4, 100, 50, 20, extra=("", "BAD,ROW,ONLY")),
        5: _month_text(5, 150, 60, 30),
        6: _month_text(
            6, 200, 70, 40,
            extra=(f"TINYMOTO,X1,BASE,1,PETROL,50,MOPED,6,2025,{HOSUR}",),
        ),
    }


@pytest.fixture
def dataset(month_texts):
    return RegistrationDataset.from_texts(month_texts)


@pytest.fixture
def records(dataset):
    return dataset.records


@pytest.fixture
def loader(month_texts):
    return DatasetLoader(fetch=lambda month: month_texts[month], months=month_texts.keys())
