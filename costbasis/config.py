"""
User configuration, stored in INI format.

Looked for in ~/.config/costbasis/costbasis.cfg unless the COSTBASIS_CONFIG
environment variable points elsewhere.  Missing file -> built-in defaults.
"""
import os
import configparser


CONFIG_DIR = os.path.join(os.path.expanduser("~"), ".config", "costbasis")
CONFIG_PATH = os.environ.get(
    "COSTBASIS_CONFIG", os.path.join(CONFIG_DIR, "costbasis.cfg")
)


class CostbasisConfig(configparser.ConfigParser):
    def make_default(self):
        self["holding"] = {"removal_policy": "DEFAULT"}
        self["report"] = {"precision": "2", "price_precision": "4"}
        self["data"] = {"default_dir": ""}

    @property
    def removal_policy(self):
        # Avoid recursive imports config <-> inventory.report
        from costbasis.inventory.policies import RemovalPolicy

        token = self.get("holding", "removal_policy", fallback="DEFAULT")
        return RemovalPolicy.from_token(token)

    @property
    def precision(self) -> int:
        return self.getint("report", "precision", fallback=2)

    @property
    def price_precision(self) -> int:
        return self.getint("report", "price_precision", fallback=4)

    @property
    def default_dir(self) -> str:
        return self.get("data", "default_dir", fallback="")

    def save(self, path=None):
        path = path or CONFIG_PATH
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        with open(path, "w") as configfile:
            self.write(configfile)


CONFIG = CostbasisConfig()
CONFIG.make_default()


if os.path.exists(CONFIG_PATH):
    CONFIG.read(CONFIG_PATH)
