from setuptools import setup, find_packages

setup(
    name="drivenote-cli",
    version="0.1.0",
    description="OneDrive browser and note sync CLI",
    package_dir={"": "drivenote_cli"},
    packages=find_packages("drivenote_cli"),
    include_package_data=True,
    install_requires=["InquirerPy", "tqdm"],
    extras_require={"test": ["pytest"]},
    entry_points={
        "console_scripts": [
            "drivenote=drivenote_cli.__main__:main",
        ]
    },
)
