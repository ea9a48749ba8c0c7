"""1次元Saint-Venant（浅水）方程式の時間発展ソルバー"""

__version__ = "0.1.0"
